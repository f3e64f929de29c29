"""
Fruit decision regions.
User-defined visualization function for the trained fruit classifier.
"""
import logging
import os

from fruitnet.visualization.decision_regions import plot_decision_regions

FRUIT_COLORS = {
    "apple": "tab:red",
    "banana": "gold",
    "grape": "tab:green",
}


def visualize_model(model, cfg, datasets_dict):
    """
    Plot the 0.5 boundary of every fruit output with the training and test samples.

    Args:
        model: Trained network
        cfg: Configuration object
        datasets_dict: Dictionary of datasets

    Returns:
        str: Path to the generated visualization image
    """
    logger = logging.getLogger("fruitnet.projects.fruits.visualization")

    splits = datasets_dict[list(datasets_dict.keys())[0]]
    train_ds = splits["train"]
    colors = [FRUIT_COLORS.get(name, "tab:gray") for name in train_ds.labels]

    viz_cfg = cfg.get("visualization", {})
    features = "_".join(train_ds.features)
    paths = []
    for split_name, ds in splits.items():
        output_path = os.path.join(cfg.paths.plot_dir, f"{cfg.project_name}_{features}_{split_name}.png")
        paths.append(plot_decision_regions(
            model,
            ds.groups,
            output_path,
            feature_names=[f"average {f}" for f in ds.features],
            colors=colors,
            threshold=viz_cfg.get("threshold", 0.5),
            resolution=viz_cfg.get("resolution", 100),
            title=f"Fruit classifier ({split_name} samples)",
        ))
        logger.info(f"{split_name}: {len(ds)} samples plotted")

    return paths[0]
