import matplotlib.pyplot as plt
import numpy as np

from profile_calc import Dataset, ProfileLikelihoodCalculator, models
from profile_calc.plotting import plot_profile

rng = np.random.default_rng(1)
data = Dataset.from_array(rng.exponential(1.5, size=60))

pdf = models.exponential(tau=1.0)
calc = ProfileLikelihoodCalculator(data=data, pdf=pdf, parameters=pdf.parameters.select(["tau"]))
interval = calc.get_interval()

fig, ax = plot_profile(interval, "tau")
ax.legend()
plt.show()
