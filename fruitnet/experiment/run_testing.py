from omegaconf import DictConfig
import logging
from collections import Counter

import pytorch_lightning as pl
import torch

from fruitnet.data.labels import onecold
from fruitnet.experiment.setup_dataloaders import setup_dataloaders
from fruitnet.experiment.run_training import _as_pl_logger


def run_testing(cfg: DictConfig, datasets_dict, model, pl_loggers=None):
    """Evaluate the in-memory model trained in this run on the test split."""
    logger = logging.getLogger("fruitnet.experiment")

    if model is None:
        logger.warning("No trained model available")
        logger.info("Testing phase skipped - enable the training phase in the same run")
        return None

    dataloaders = setup_dataloaders(datasets_dict, cfg.dataloader, splits=["test"])

    primary_dataset = list(datasets_dict.keys())[0]
    test_loader = dataloaders.get(primary_dataset, {}).get("test")

    if test_loader is None:
        logger.warning("No test dataloader found. Available splits: %s", list(datasets_dict[primary_dataset].keys()))
        logger.info("Testing phase skipped - no test data available")
        return None

    logger.info(f"Using test split for testing with {len(test_loader.dataset)} samples")

    trainer = pl.Trainer(
        accelerator=cfg.trainer.get("accelerator", "auto"),
        devices=cfg.trainer.get("devices", "auto"),
        logger=_as_pl_logger(pl_loggers),
        enable_checkpointing=False,
        enable_progress_bar=cfg.trainer.get("enable_progress_bar", True),
        enable_model_summary=False,
    )

    logger.info("Starting testing...")
    test_results = trainer.test(model=model, dataloaders=test_loader)

    if test_results:
        logger.info("=== TEST RESULTS ===")
        for key, value in test_results[0].items():
            logger.info(f"{key}: {value}")
        logger.info("====================")

    _log_confusions(test_loader.dataset, model, logger)
    return test_results[0] if test_results else None


@torch.no_grad()
def _log_confusions(dataset, model, logger):
    labels = getattr(dataset, "labels", None)
    if labels is None:
        return
    model.eval()
    predicted = onecold(model(dataset.x), labels)
    actual = onecold(dataset.y, labels)
    counts = Counter(zip(actual, predicted))
    for true_label in labels:
        row = ", ".join(f"{p}={counts[(true_label, p)]}" for p in labels)
        logger.info(f"  true {true_label}: predicted {row}")
