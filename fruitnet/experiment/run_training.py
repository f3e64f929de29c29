from omegaconf import DictConfig, OmegaConf
import logging
import pytorch_lightning as pl

from fruitnet.experiment.setup_dataloaders import setup_dataloaders
from fruitnet._pytorch_lightning.lit_model import LitModel


def _as_pl_logger(pl_loggers):
    # Lightning expects False, a single logger, or a list of loggers
    if not pl_loggers:
        return False
    return pl_loggers[0] if len(pl_loggers) == 1 else pl_loggers


def run_training(cfg: DictConfig, datasets_dict, pl_loggers=None) -> LitModel:
    """Run the training phase and return the trained in-memory model."""
    logger = logging.getLogger("fruitnet.experiment")

    seed = cfg.get("seed", 42)
    pl.seed_everything(seed)

    logger.info("Creating Lightning model...")
    model = LitModel(cfg)
    logger.info(f"Network:\n{model.net}")

    logger.info("Creating dataloaders...")
    dataloaders = setup_dataloaders(datasets_dict, cfg.dataloader, splits=["train"])

    # Primary dataset is the first one configured
    primary_dataset = list(datasets_dict.keys())[0]
    primary_dataloaders = dataloaders.get(primary_dataset, {})

    train_loader = primary_dataloaders.get("train")
    if train_loader is None:
        raise ValueError(f"No training dataloader found for dataset '{primary_dataset}'. "
                         f"Available splits: {list(datasets_dict[primary_dataset].keys())}")

    logger.info("Creating PyTorch Lightning Trainer...")
    trainer_cfg = OmegaConf.to_container(cfg.trainer, resolve=True)
    trainer = pl.Trainer(logger=_as_pl_logger(pl_loggers), **trainer_cfg)

    logger.info(f"Starting training for {trainer_cfg.get('max_epochs', 'default')} epochs "
                f"over {len(train_loader.dataset)} samples...")
    trainer.fit(model=model, train_dataloaders=train_loader)

    final_metrics = {k: float(v) for k, v in trainer.callback_metrics.items()}
    logger.info(f"Training finished: {final_metrics}")
    return model
