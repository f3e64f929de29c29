"""
Plain per-sample training loop over an in-memory model.

The caller owns the epoch loop:

    >>> opt = create_optimizer({"class": "torch.optim.SGD", "args": {"lr": 0.1}}, model.parameters())
    >>> for epoch in range(200):
    ...     train(model, torch.nn.MSELoss(), dataset, opt)
"""
import logging
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

import torch
import torch.nn as nn

from fruitnet.experiment.utils import import_class

logger = logging.getLogger("fruitnet.training.loop")

Pair = Tuple[torch.Tensor, torch.Tensor]


def create_optimizer(optimizer_cfg: Dict[str, Any], parameters: Iterable[torch.nn.Parameter]):
    """Build an update rule from ``{class: dotted.path, args: {...}}``.

    Plain gradient descent is ``torch.optim.SGD``; ``torch.optim.Adam`` keeps
    per-parameter moment estimates.
    """
    cls = import_class(optimizer_cfg.get("class", "torch.optim.SGD"))
    return cls(parameters, **optimizer_cfg.get("args", {}))


def train(model: nn.Module,
          loss_fn: Callable[[torch.Tensor, torch.Tensor], torch.Tensor],
          data: Sequence[Pair],
          optimizer: torch.optim.Optimizer,
          *,
          shuffle: bool = True,
          generator: Optional[torch.Generator] = None) -> None:
    """One pass over ``data`` with one parameter update per (x, y) pair.

    Args:
        model: Model to update in place.
        loss_fn: Scalar loss of (prediction, target).
        data: Indexable (x, y) pairs, e.g. a list or a torch Dataset.
        optimizer: Update rule over ``model.parameters()``.
        shuffle: Visit the pairs in a fresh random order.
        generator: Seeded generator for a reproducible order.
    """
    n = len(data)
    order = torch.randperm(n, generator=generator).tolist() if shuffle else range(n)

    model.train()
    for i in order:
        x, y = data[i]
        optimizer.zero_grad()
        loss = loss_fn(model(x), y)
        loss.backward()
        optimizer.step()

    logger.debug(f"Completed pass over {n} samples")


@torch.no_grad()
def mean_loss(model: nn.Module,
              loss_fn: Callable[[torch.Tensor, torch.Tensor], torch.Tensor],
              data: Sequence[Pair]) -> float:
    """Average per-sample loss over ``data``, no gradient tracking."""
    if len(data) == 0:
        raise ValueError("Cannot compute the loss of an empty dataset")
    total = 0.0
    for i in range(len(data)):
        x, y = data[i]
        total += float(loss_fn(model(x), y))
    return total / len(data)


@torch.no_grad()
def accuracy(model: nn.Module, data: Sequence[Pair]) -> float:
    """Fraction of samples whose arg-max output matches the indicator's active position."""
    if len(data) == 0:
        raise ValueError("Cannot compute the accuracy of an empty dataset")
    correct = 0
    for i in range(len(data)):
        x, y = data[i]
        correct += int(model(x).argmax(dim=-1) == y.argmax(dim=-1))
    return correct / len(data)
