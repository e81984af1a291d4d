from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .model import GaussianConstraint, Pdf
from .params import ParameterSet


@dataclass
class ModelConfig:
    """Roles of a model's parameters, by name.

    ``constraints`` are auxiliary measurements on nuisance parameters; a
    calculator built from this config fits the product of ``pdf`` and them.
    """

    pdf: Pdf
    parameters_of_interest: Tuple[str, ...]
    nuisance_parameters: Tuple[str, ...] = ()
    null_values: Dict[str, float] = field(default_factory=dict)
    constraints: Tuple[GaussianConstraint, ...] = ()
    name: str = "ModelConfig"

    def __post_init__(self) -> None:
        self.parameters_of_interest = tuple(self.parameters_of_interest)
        self.nuisance_parameters = tuple(self.nuisance_parameters)
        self.constraints = tuple(self.constraints)
        self.null_values = {k: float(v) for k, v in self.null_values.items()}
        known = self.pdf.parameters
        for n in (
            self.parameters_of_interest
            + self.nuisance_parameters
            + tuple(self.null_values)
        ):
            if n not in known:
                raise KeyError(f"{n!r} is not a parameter of {self.pdf.name!r}.")

    def poi_set(self) -> ParameterSet:
        return self.pdf.parameters.select(self.parameters_of_interest)

    def nuisance_set(self) -> ParameterSet:
        return self.pdf.parameters.select(self.nuisance_parameters)

    def set_pdf(self, pdf: Pdf) -> None:
        self.pdf = pdf

    def constrained_pdf(self) -> Optional[Pdf]:
        """Product of the pdf and the constraint terms (None without constraints)."""
        if not self.constraints:
            return None
        return self.pdf.with_constraints(*self.constraints)
