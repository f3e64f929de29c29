import torch
import torch.nn as nn

from fruitnet.nn.activations import activation_name, resolve_activation


class DimensionMismatch(ValueError):
    """Raised when a tensor or a neighbouring layer has the wrong size."""


class Dense(nn.Linear):

    """
    Fully connected layer: activation(W @ x + b).

    W has shape (out_features, in_features) and b has length out_features.
    Weights are Glorot-uniform initialized and the bias starts at zero.
    Accepts a single sample (in_features,) or a batch (batch, in_features)
    with samples along the first dimension.
    """

    def __init__(self, in_features: int, out_features: int, activation="identity") -> None:
        if in_features < 1 or out_features < 1:
            raise ValueError(f"Layer sizes must be positive, got {in_features} -> {out_features}")
        super().__init__(in_features, out_features, bias=True)
        self.activation = resolve_activation(activation)


    def reset_parameters(self) -> None:
        nn.init.xavier_uniform_(self.weight)
        nn.init.zeros_(self.bias)


    def forward(self, x: torch.Tensor) -> torch.Tensor:
        if x.dim() not in (1, 2) or x.shape[-1] != self.in_features:
            raise DimensionMismatch(
                f"Dense({self.in_features} => {self.out_features}) expects input of shape "
                f"({self.in_features},) or (batch, {self.in_features}), got {tuple(x.shape)}"
            )
        return self.activation(super().forward(x))


    def extra_repr(self) -> str:
        return f"{self.in_features} => {self.out_features}, {activation_name(self.activation)}"
