from profile_calc import (
    Dataset,
    GaussianConstraint,
    ModelConfig,
    ProfileLikelihoodCalculator,
    models,
)

# n ~ Poisson(s + b); the background has an auxiliary measurement b = 3.0 ± 1.0.
pdf = models.poisson_counting(s=1.0, b=3.0)
config = ModelConfig(
    pdf=pdf,
    parameters_of_interest=("s",),
    nuisance_parameters=("b",),
    null_values={"s": 0.0},
    constraints=(GaussianConstraint("b", 3.0, 1.0),),
    name="counting",
)
data = Dataset.from_array([10.0])

calc = ProfileLikelihoodCalculator.from_model_config(data, config, size=0.32)
print("fitting", calc.pdf.name)

result = calc.get_hypo_test()
print(f"background-only p-value: {result.null_p_value:.3g} ({result.significance:.2f} sigma)")

interval = calc.get_interval()
lo, hi = interval.limits("s")
print(f"s = {interval.best_fit['s'].value:.3f}, 68% CL [{lo:.3f}, {hi:.3f}]")

# A 95% CL region from the same profile: only the edges are recomputed.
interval.set_confidence_level(0.95)
print("95% CL:", interval.limits("s"))
