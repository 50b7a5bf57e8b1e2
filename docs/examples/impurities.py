# %% [markdown]
# # Impurities, grain size and grain shape
#
# Broadband albedo sensitivity using the idealized optical properties.
# %%
import matplotlib.pyplot as plt
import numpy as np

import srt1d as srt

# %matplotlib inline

# %% [markdown]
# ## Black carbon
# BC in the top 2 cm of a semi-infinite snowpack.

# %%
m = srt.Model(nlayers=2)

bc = [0, 10, 100, 1000, 10000]
dsets = []
for x in bc:
    m.update_impurities(bc=[x, 0]).run()
    dsets.append(m.to_xr(info=f"BC {x} ppb"))

srt.diagnostics.plot_compare_albedo(dsets, ds_labels=[f"{x} ppb" for x in bc])

# %% [markdown]
# ## Grain size

# %%
rds = [50, 100, 200, 500, 1000]
alb = {
    k: [srt.Model(rds_snw=r).run().out[f"alb_{k}"] for r in rds] for k in ["slr", "vis", "nir"]
}

fig, ax = plt.subplots()
for k, v in alb.items():
    ax.plot(rds, v, "o-", label=k)
ax.set(xlabel="Grain radius (μm)", ylabel="Albedo", xscale="log")
ax.legend()

# %% [markdown]
# ## Grain shape

# %%
dsets = [
    srt.Model(sno_shp=shape.value).run().to_xr(info=shape.name)
    for shape in srt.grain_shape.GrainShape
]
srt.diagnostics.plot_compare_albedo(dsets, ref=0, ds_labels="info")

# %% [markdown]
# ## Snow algae

# %%
cells = np.r_[0, 1e3, 1e4, 1e5]
alb_vis = [
    srt.Model(nlayers=2, cell_nbr_conc=[c, 0], alg_rds=10).run().out["alb_vis"] for c in cells
]
alb_vis

# %%
plt.show()
