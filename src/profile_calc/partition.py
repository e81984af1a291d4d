"""Split a model's parameters into constant and floating sets."""

from __future__ import annotations

from typing import Any, Optional

from .params import ParameterSet


def remove_constant_parameters(params: ParameterSet) -> ParameterSet:
    """Return the non-constant members of ``params`` (same instances)."""
    return params.floating()


def floating_parameters(backend: Any, model: Any, data: Any) -> Optional[ParameterSet]:
    """Parameters free to float in a fit of ``model`` to ``data``.

    The same set is handed to the backend as the constrain set. None when the
    backend cannot extract the model's parameters for ``data``.
    """
    params = backend.extract_parameters(model, data)
    if params is None:
        return None
    return remove_constant_parameters(params)
