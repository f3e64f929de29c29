"""
Visualization phase: decision regions of the trained model.
Projects can provide ``projects.<project_name>.src.visualize.visualize_model``
to pick their own colours and titles; otherwise the generic plot is used.
"""
import logging
import os
from pathlib import Path

from omegaconf import DictConfig

from fruitnet.experiment.utils import import_class
from fruitnet.visualization.decision_regions import plot_decision_regions


def visualize_model(model, cfg: DictConfig, datasets_dict):
    """
    Default visualization: plot the primary dataset's training groups.

    Args:
        model: Trained network (``R^n -> R^K`` callable)
        cfg: Configuration object
        datasets_dict: Dictionary of datasets

    Returns:
        str: Path to the generated image
    """
    primary_dataset = list(datasets_dict.keys())[0]
    splits = datasets_dict[primary_dataset]
    dataset = splits.get("train")
    if dataset is None:
        dataset = next(iter(splits.values()))

    viz_cfg = cfg.get("visualization", {})
    output_path = os.path.join(cfg.paths.plot_dir, f"{cfg.project_name}_decision_regions.png")
    return plot_decision_regions(
        model,
        dataset.groups,
        output_path,
        feature_names=dataset.features,
        threshold=viz_cfg.get("threshold", 0.5),
        resolution=viz_cfg.get("resolution", 100),
    )


def get_visualizer(cfg: DictConfig):
    """
    Get the visualization function for the current project.

    Tries ``projects.<project_name>.src.visualize.visualize_model`` first and
    falls back to the default implementation if the project has none.
    """
    logger = logging.getLogger("fruitnet.experiment.visualization")

    project_module = f"projects.{cfg.project_name}.src.visualize"
    try:
        project_visualizer = import_class(f"{project_module}.visualize_model")
    except (ImportError, AttributeError) as e:
        logger.info(f"No project-specific visualizer found ({e}), using default")
        return visualize_model

    logger.info(f"Using project-specific visualizer from {project_module}")
    return project_visualizer


def run_visualization(cfg: DictConfig, datasets_dict, model):
    """Render the decision regions of the trained model into ``cfg.paths.plot_dir``."""
    logger = logging.getLogger("fruitnet.experiment")

    if model is None:
        logger.warning("No trained model available")
        logger.info("Visualization phase skipped - enable the training phase in the same run")
        return None

    Path(cfg.paths.plot_dir).mkdir(parents=True, exist_ok=True)

    net = getattr(model, "net", model)
    visualizer = get_visualizer(cfg)
    path = visualizer(net, cfg, datasets_dict)
    logger.info(f"Visualization written to {path}")
    return path
