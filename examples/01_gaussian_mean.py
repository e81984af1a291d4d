import numpy as np

from profile_calc import Dataset, ProfileLikelihoodCalculator, models

rng = np.random.default_rng(0)
data = Dataset.from_array(rng.normal(2.0, 1.0, size=50))

# Width is known: only the mean floats.
pdf = models.gaussian(mu=0.0).fix(sigma=1.0)
calc = ProfileLikelihoodCalculator(
    data=data,
    pdf=pdf,
    parameters=pdf.parameters.select(["mu"]),
    size=0.05,
    null_parameters={"mu": 0.0},
)

interval = calc.get_interval()
print(calc.fit_result.summary())
print(
    f"{100 * interval.confidence_level:g}% CL interval on mu: "
    f"[{interval.lower_limit('mu'):.4f}, {interval.upper_limit('mu'):.4f}]"
)
print("mu = 2.5 inside:", interval.contains({"mu": 2.5}))

result = calc.get_hypo_test()
print(result.summary())
