from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

import numpy as np

try:
    import uncertainties
except Exception:  # pragma: no cover - optional at import time
    uncertainties = None


__all__ = ["Parameter", "ParameterSet"]


Bounds = Tuple[Optional[float], Optional[float]]


@dataclass(eq=False)
class Parameter:
    """A named, mutable scalar shared between a model and its callers.

    Identity matters: the same instance is referenced by the model, the
    parameters-of-interest set and the calculator, so mutating ``value`` or
    ``constant`` here is visible everywhere.
    """

    name: str
    value: float
    error: Optional[float] = None
    constant: bool = False
    bounds: Optional[Bounds] = None

    def __post_init__(self) -> None:
        self.value = float(self.value)
        if self.error is not None:
            self.error = float(self.error)

    @property
    def lower(self) -> float:
        if self.bounds is None or self.bounds[0] is None:
            return -np.inf
        return float(self.bounds[0])

    @property
    def upper(self) -> float:
        if self.bounds is None or self.bounds[1] is None:
            return np.inf
        return float(self.bounds[1])

    def set_value(self, value: float) -> None:
        self.value = float(value)

    def set_error(self, error: Optional[float]) -> None:
        self.error = None if error is None else float(error)

    def set_constant(self, constant: bool = True) -> None:
        self.constant = bool(constant)

    def copy(self) -> "Parameter":
        """Return a detached copy (a new instance with the same state)."""
        return replace(self)

    @property
    def u(self):
        """Return an uncertainties ufloat if an error is available."""
        if self.error is None:
            raise ValueError(f"No error available for parameter {self.name!r}.")
        if uncertainties is None:
            raise RuntimeError("uncertainties package is not available.")
        return uncertainties.ufloat(self.value, self.error)


class ParameterSet(Mapping[str, Parameter]):
    """Ordered mapping name -> Parameter holding references, not copies."""

    def __init__(self, params: Union[Iterable[Parameter], Mapping[str, Parameter], None] = None):
        self._items: Dict[str, Parameter] = {}
        if params is None:
            return
        if isinstance(params, Mapping):
            params = params.values()
        for p in params:
            self.add(p)

    def __getitem__(self, key):  # type: ignore[override]
        if isinstance(key, str):
            return self._items[key]
        if isinstance(key, int):
            name = tuple(self._items)[key]
            return self._items[name]
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        body = ", ".join(
            f"{p.name}={p.value:g}{' (const)' if p.constant else ''}"
            for p in self._items.values()
        )
        return f"ParameterSet({body})"

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._items)

    def add(self, param: Parameter) -> None:
        """Add a parameter; a parameter with the same name is kept as-is."""
        if not isinstance(param, Parameter):
            raise TypeError(f"Expected Parameter, got {type(param).__name__}.")
        self._items.setdefault(param.name, param)

    def find(self, name: str) -> Optional[Parameter]:
        return self._items.get(name)

    def floating(self) -> "ParameterSet":
        return ParameterSet(p for p in self._items.values() if not p.constant)

    def constant(self) -> "ParameterSet":
        return ParameterSet(p for p in self._items.values() if p.constant)

    def select(self, names: Iterable[str]) -> "ParameterSet":
        """Return the members whose names appear in ``names`` (in set order)."""
        wanted = set(names)
        return ParameterSet(p for p in self._items.values() if p.name in wanted)

    def as_dict(self) -> Dict[str, float]:
        """Return name->value."""
        return {k: p.value for k, p in self._items.items()}

    def snapshot(self) -> "ParameterSet":
        """Return a detached deep copy of the set."""
        return ParameterSet(p.copy() for p in self._items.values())
