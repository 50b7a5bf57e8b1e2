# %% [markdown]
# # Run each closure
#
# We test the following:
#
# * running the model with the default case
# * plot methods for the `Model` class
# * output xr
# * plots for output xr
# %%
import matplotlib.pyplot as plt

import srt1d as srt

# %matplotlib inline

# %% [markdown]
# ## Run
# Run the default case (which is loaded automatically when the model object is created),
# with a few thin layers on top of the semi-infinite bottom layer.

# %%
ms = []
for closure in srt.solvers.AVAILABLE_CLOSURES:
    m = srt.Model(closure, nlayers=8)
    m.run()
    ms.append(m)

dsets = [m.to_xr() for m in ms]

# %% [markdown]
# ### Examine default case
#
# Layer properties and incident spectra, using the plotting methods attached to the `Model` instance.

# %%
ms[0].plot_layers()

# %%
ms[0].plot_incident_spectra()

# %%
ms[0].plot_albedo()

# %% [markdown]
# ## Plots of results

# %%
srt.diagnostics.plot_compare_albedo(dsets, ref=2)

# %%
srt.diagnostics.plot_compare_abs(dsets, band_name="vis")

# %%
srt.diagnostics.plot_compare_abs(dsets, band_name="nir")

# %% [markdown]
# ### Energy balance

# %%
srt.diagnostics.compare_ebal(dsets).round(4)

# %% [markdown]
# ## Datasets and their variables

# %%
dsets[0]

# %%
srt.diagnostics.band(dsets[0], band_name="vis")

# %%
ms[0].out_extra.keys()

# %%
plt.show()
