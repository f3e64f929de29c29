import logging
from typing import Iterable, Optional, Sequence, Tuple, Union

import torch
import torch.nn as nn

from fruitnet.nn.activations import softmax
from fruitnet.nn.layers import Dense, DimensionMismatch

logger = logging.getLogger("fruitnet.nn.chain")

NORMALIZATIONS = {"softmax": softmax}

LayerSpec = Tuple[int, int, Union[str, None]]


class Chain(nn.Module):

    """
    Dense layers applied left to right, optionally followed by a softmax.

    Each layer's output size must equal the next layer's input size; this is
    checked once here so a bad architecture fails before any data flows.
    """

    def __init__(self, layers: Iterable[Dense], normalize: Optional[str] = None) -> None:
        super().__init__()
        self.layers = nn.ModuleList(layers)
        if len(self.layers) == 0:
            raise ValueError("Chain needs at least one layer")

        for i, (prev, nxt) in enumerate(zip(self.layers[:-1], self.layers[1:])):
            if prev.out_features != nxt.in_features:
                raise DimensionMismatch(
                    f"Layer {i} outputs {prev.out_features} values "
                    f"but layer {i + 1} expects {nxt.in_features}"
                )

        if normalize is not None and normalize not in NORMALIZATIONS:
            raise ValueError(f"Unknown normalization '{normalize}'. Known: {sorted(NORMALIZATIONS)}")
        self.normalize = normalize


    @property
    def in_features(self) -> int:
        return self.layers[0].in_features


    @property
    def out_features(self) -> int:
        return self.layers[-1].out_features


    def forward(self, x: torch.Tensor) -> torch.Tensor:
        for layer in self.layers:
            x = layer(x)
        if self.normalize is not None:
            x = NORMALIZATIONS[self.normalize](x)
        return x


    def extra_repr(self) -> str:
        return f"normalize={self.normalize}"


def build_chain(layers: Sequence[LayerSpec], normalize: Optional[str] = None) -> Chain:
    """Build a Chain from (in_features, out_features, activation) triples.

    Args:
        layers: Layer descriptions in application order.
        normalize: ``None`` or ``"softmax"`` applied to the last layer's output.

    Returns:
        Chain: The assembled model, ``R^in -> R^out``.
    """
    dense_layers = []
    for spec in layers:
        if len(spec) == 2:
            in_features, out_features = spec
            activation = "identity"
        else:
            in_features, out_features, activation = spec
        dense_layers.append(Dense(int(in_features), int(out_features), activation))

    chain = Chain(dense_layers, normalize=normalize)
    n_params = sum(p.numel() for p in chain.parameters())
    logger.debug(f"Built chain {chain.in_features} -> {chain.out_features} "
                 f"with {len(dense_layers)} layers and {n_params} parameters")
    return chain
