from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np


@dataclass(frozen=True)
class Dataset:
    """Observed data: one row per event along axis 0, optional event weights."""

    x: np.ndarray
    weights: Optional[np.ndarray] = None
    name: str = "data"

    def __post_init__(self) -> None:
        x = np.asarray(self.x, dtype=float)
        if x.ndim == 0:
            x = x.reshape(1)
        object.__setattr__(self, "x", x)

        if self.weights is not None:
            w = np.asarray(self.weights, dtype=float)
            w = np.broadcast_to(w, (x.shape[0],)).copy()
            if np.any(w < 0):
                raise ValueError("Dataset weights must be non-negative.")
            object.__setattr__(self, "weights", w)

    @staticmethod
    def from_array(x: Any, *, weights: Any = None, name: str = "data") -> "Dataset":
        return Dataset(x=np.asarray(x, dtype=float), weights=weights, name=name)

    @property
    def n_events(self) -> int:
        return int(self.x.shape[0])

    @property
    def sum_weights(self) -> float:
        if self.weights is None:
            return float(self.n_events)
        return float(np.sum(self.weights))

    def copy(self) -> "Dataset":
        return Dataset(
            x=self.x.copy(),
            weights=None if self.weights is None else self.weights.copy(),
            name=self.name,
        )
