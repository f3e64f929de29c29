from typing import Optional

from fruitnet.nn.chain import Chain, build_chain


def fruit_classifier(n_features: int = 2,
                     hidden: int = 4,
                     n_classes: int = 3,
                     activation: str = "sigmoid",
                     normalize: Optional[str] = None) -> Chain:
    """
    MLP: colours -> [hidden] -> fruit scores
    n_features: 2 (red, blue) or 3 (red, green, blue)
    Loss: MSE against one-hot targets
    """
    return build_chain(
        [
            (n_features, hidden, activation),
            (hidden, n_classes, activation),
        ],
        normalize=normalize,
    )
