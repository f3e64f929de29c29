from omegaconf import DictConfig, OmegaConf
import logging

from fruitnet.experiment.setup_logging import setup_logging
from fruitnet.experiment.run_training import run_training
from fruitnet.experiment.run_testing import run_testing
from fruitnet.experiment.run_visualization import run_visualization
from fruitnet.experiment.prepare_datasets import prepare_datasets


def experiment_main(cfg: DictConfig):
    """Experiment main, receives config from main.py. Returns the trained model, if any."""
    logger = logging.getLogger("fruitnet.experiment")
    logger.info("Entered experiment_main")
    pl_loggers = setup_logging(cfg)

    logger.info('Running experiment with config:')
    logger.info('============================================================')
    try:
        logger.info(OmegaConf.to_yaml(cfg, resolve=True))
    except Exception as e:
        # Print unresolved config first, then reraise the exception
        logger.info(OmegaConf.to_yaml(cfg, resolve=False))
        logger.warning(f"Could not fully resolve config for logging: {e}")
        raise
    logger.info('============================================================')

    created_datasets = prepare_datasets(cfg)

    phases = cfg.get("phases", {"training": True, "testing": False, "visualization": False})

    logger.info("Experiment phases configuration:")
    logger.info(f"  Training: {'+' if phases.get('training', False) else '-'}")
    logger.info(f"  Testing: {'+' if phases.get('testing', False) else '-'}")
    logger.info(f"  Visualization: {'+' if phases.get('visualization', False) else '-'}")

    model = None
    if phases.get("training", False):
        logger.info("=== TRAINING PHASE ===")
        model = run_training(cfg, created_datasets, pl_loggers)
        logger.info("Training phase completed!")
    else:
        logger.info("Training phase skipped")

    if phases.get("testing", False):
        logger.info("=== TESTING PHASE ===")
        run_testing(cfg, created_datasets, model, pl_loggers)
        logger.info("Testing phase completed!")
    else:
        logger.info("Testing phase skipped")

    if phases.get("visualization", False):
        logger.info("=== VISUALIZATION PHASE ===")
        run_visualization(cfg, created_datasets, model)
        logger.info("Visualization phase completed!")
    else:
        logger.info("Visualization phase skipped")

    logger.info("All experiment phases completed!")
    return model
