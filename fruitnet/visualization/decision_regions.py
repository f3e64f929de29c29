"""
Decision-region plots for small classifiers over [0,1]^2 or [0,1]^3.

The model is treated as a black box ``R^n -> R^K`` evaluated once, batched,
over a regular grid; nothing is written back to it.
"""
import logging
import os
from typing import Callable, Mapping, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import torch

logger = logging.getLogger("fruitnet.visualization")


@torch.no_grad()
def evaluate_grid(model: Callable[[torch.Tensor], torch.Tensor],
                  n_features: int = 2,
                  resolution: int = 100) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Evaluate ``model`` on every point of a regular grid in [0,1]^n_features.

    Returns:
        axis: (resolution,) grid coordinates shared by every feature
        outputs: tensor of shape (resolution,) * n_features + (K,), where
                 ``outputs[i, j]`` is the model output at (axis[i], axis[j])
    """
    if n_features not in (2, 3):
        raise ValueError(f"Only 2 or 3 features can be plotted, got {n_features}")
    if resolution < 2:
        raise ValueError(f"Grid resolution must be at least 2, got {resolution}")

    axis = torch.linspace(0.0, 1.0, resolution)
    mesh = torch.meshgrid(*([axis] * n_features), indexing="ij")
    points = torch.stack([m.reshape(-1) for m in mesh], dim=1)
    outputs = model(points)
    return axis, outputs.reshape(*([resolution] * n_features), -1)


def plot_decision_regions(model: Callable[[torch.Tensor], torch.Tensor],
                          groups: Mapping[str, torch.Tensor],
                          output_path: str,
                          feature_names: Optional[Sequence[str]] = None,
                          colors: Optional[Sequence] = None,
                          threshold: float = 0.5,
                          resolution: int = 100,
                          title: Optional[str] = None) -> str:
    """
    Draw per-class ``threshold`` boundaries of ``model`` and the raw samples.

    Args:
        model: Trained model, called with a (N, n_features) batch.
        groups: Ordered mapping category -> (n, n_features) samples; the order
                must match the model's output positions.
        output_path: PNG file to write.
        feature_names: Axis labels, defaults to x1, x2[, x3].
        colors: One matplotlib colour per category.
        threshold: Output level drawn as the class boundary.
        resolution: Grid points per axis (capped at 20 for 3 features).
        title: Figure title.

    Returns:
        str: Path of the written image.
    """
    labels = list(groups.keys())
    if not labels:
        raise ValueError("Nothing to plot: no sample groups given")
    n_features = next(iter(groups.values())).shape[1]
    feature_names = list(feature_names or [f"x{i + 1}" for i in range(n_features)])
    if colors is None:
        cmap = plt.get_cmap("tab10")
        colors = [cmap(k) for k in range(len(labels))]

    was_training = getattr(model, "training", False)
    if hasattr(model, "eval"):
        model.eval()
    try:
        if n_features == 3:
            resolution = min(resolution, 20)
        axis, outputs = evaluate_grid(model, n_features, resolution)
    finally:
        if was_training:
            model.train()

    if outputs.shape[-1] != len(labels):
        raise ValueError(f"Model produces {outputs.shape[-1]} outputs but {len(labels)} categories were given")

    if n_features == 2:
        fig = _plot_2d(axis.numpy(), outputs.numpy(), groups, labels, colors, feature_names, threshold)
    else:
        fig = _plot_3d(axis.numpy(), outputs.numpy(), groups, labels, colors, feature_names, threshold)

    if title:
        fig.suptitle(title)

    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    fig.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    logger.info(f"Decision regions saved: {output_path}")
    return str(output_path)


def _plot_2d(axis, outputs, groups, labels, colors, feature_names, threshold):
    fig, ax = plt.subplots(figsize=(6, 6))
    for k, name in enumerate(labels):
        scores = outputs[..., k]
        # contour wants z[row=y, col=x]; the grid is indexed [x, y]
        if scores.min() < threshold < scores.max():
            ax.contour(axis, axis, scores.T, levels=[threshold], colors=[colors[k]])
        else:
            logger.debug(f"Output for '{name}' never crosses {threshold}, no boundary drawn")
        pts = groups[name].numpy()
        ax.scatter(pts[:, 0], pts[:, 1], color=colors[k], edgecolors="black", label=name)

    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_xlabel(feature_names[0])
    ax.set_ylabel(feature_names[1])
    ax.legend(loc="best")
    return fig


def _plot_3d(axis, outputs, groups, labels, colors, feature_names, threshold):
    fig = plt.figure(figsize=(7, 7))
    ax = fig.add_subplot(projection="3d")

    mesh = np.meshgrid(axis, axis, axis, indexing="ij")
    best = outputs.argmax(axis=-1)
    confident = outputs.max(axis=-1) > threshold
    for k, name in enumerate(labels):
        mask = confident & (best == k)
        ax.scatter(mesh[0][mask], mesh[1][mask], mesh[2][mask], color=colors[k], alpha=0.05, s=4)
        pts = groups[name].numpy()
        ax.scatter(pts[:, 0], pts[:, 1], pts[:, 2], color=colors[k], edgecolors="black", label=name)

    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_zlim(0, 1)
    ax.set_xlabel(feature_names[0])
    ax.set_ylabel(feature_names[1])
    ax.set_zlabel(feature_names[2])
    ax.legend(loc="best")
    return fig
