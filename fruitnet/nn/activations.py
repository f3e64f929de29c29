from typing import Callable, Union

import torch
import torch.nn.functional as F

from fruitnet.experiment.utils import import_class


def identity(x: torch.Tensor) -> torch.Tensor:
    return x


def softmax(x: torch.Tensor) -> torch.Tensor:
    # last dim holds the classes for both vectors and (batch, classes) inputs
    return torch.softmax(x, dim=-1)


ACTIVATIONS = {
    "identity": identity,
    "sigmoid": torch.sigmoid,
    "relu": torch.relu,
    "tanh": torch.tanh,
    "softmax": softmax,
    "leaky_relu": F.leaky_relu,
    "softplus": F.softplus,
}


def resolve_activation(spec: Union[str, Callable, None]) -> Callable:
    """Turn an activation spec from code or config into a callable.

    Accepts a callable, one of the short names in ``ACTIVATIONS``, a dotted
    import path (e.g. ``torch.nn.functional.elu``) or ``None`` for identity.
    """
    if spec is None:
        return identity
    if callable(spec):
        return spec
    if not isinstance(spec, str):
        raise ValueError(f"Unsupported activation spec: {spec!r}")
    name = spec.strip().lower()
    if name in ACTIVATIONS:
        return ACTIVATIONS[name]
    if "." in spec:
        fn = import_class(spec)
        if not callable(fn):
            raise ValueError(f"Activation '{spec}' is not callable")
        return fn
    raise ValueError(f"Unknown activation '{spec}'. Known: {sorted(ACTIVATIONS)}")


def activation_name(fn: Callable) -> str:
    for name, known in ACTIVATIONS.items():
        if fn is known:
            return name
    return getattr(fn, "__name__", fn.__class__.__name__)
