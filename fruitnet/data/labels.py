from typing import Any, Hashable, List, Mapping, Sequence, Tuple, Union

import torch


def class_indices(group_sizes: Sequence[int]) -> torch.Tensor:
    """1-based class index for every sample of consecutive groups.

    ``class_indices([2, 1, 3])`` gives ``tensor([1, 1, 2, 3, 3, 3])``.
    """
    sizes = torch.as_tensor(list(group_sizes), dtype=torch.long)
    if (sizes < 0).any():
        raise ValueError(f"Group sizes must be non-negative, got {list(group_sizes)}")
    return torch.repeat_interleave(torch.arange(1, len(sizes) + 1), sizes)


def onehot(label: Hashable, labels: Sequence[Hashable]) -> torch.Tensor:
    labels = list(labels)
    try:
        position = labels.index(label)
    except ValueError:
        raise ValueError(f"Label {label!r} is not one of {labels}") from None
    vec = torch.zeros(len(labels), dtype=torch.float32)
    vec[position] = 1.0
    return vec


def onehotbatch(values: Sequence[Hashable], labels: Sequence[Hashable]) -> torch.Tensor:
    """Indicator rows for every value, shape (len(values), len(labels))."""
    if isinstance(values, torch.Tensor):
        values = values.tolist()
    labels = list(labels)
    if len(values) == 0:
        return torch.zeros((0, len(labels)), dtype=torch.float32)
    return torch.stack([onehot(v, labels) for v in values])


def onecold(y: torch.Tensor, labels: Sequence[Any]) -> Union[Any, List[Any]]:
    """Inverse of onehot: the label at the arg-max position (per row for a batch)."""
    labels = list(labels)
    if y.shape[-1] != len(labels):
        raise ValueError(f"Expected {len(labels)} scores per sample, got {y.shape[-1]}")
    idx = y.argmax(dim=-1)
    if y.dim() == 1:
        return labels[int(idx)]
    return [labels[int(i)] for i in idx]


def encode_groups(groups: Mapping[str, torch.Tensor]) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """
    Flatten ordered category groups into aligned training arrays.

    Returns:
        features: (N, n_features) concatenation of the groups, in mapping order
        classes: (N,) 1-based class index of every row
        indicators: (N, K) one-hot rows, active position at the class index
    """
    tensors = list(groups.values())
    if not tensors:
        raise ValueError("No groups to encode")
    features = torch.cat(tensors, dim=0)
    classes = class_indices([t.shape[0] for t in tensors])
    indicators = onehotbatch(classes, range(1, len(tensors) + 1))
    return features, classes, indicators
