import logging
import os
from typing import Any, List, Optional

from omegaconf import DictConfig

from fruitnet.experiment.utils import import_class

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILE_NAME = "experiment.log"


def configure_root_logger(level: int, log_dir: str) -> str:
    """Replace the root handlers with a console handler and ``<log_dir>/experiment.log``.

    Returns:
        str: Path of the log file.
    """
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, LOG_FILE_NAME)
    formatter = logging.Formatter(LOG_FORMAT)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    for handler in (logging.StreamHandler(), logging.FileHandler(log_file)):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)

    # Lightning reports fit/test progress through its own loggers
    for name in ("pytorch_lightning", "lightning.pytorch"):
        logging.getLogger(name).setLevel(level)
    return log_file


def create_pl_loggers(logger_configs) -> List[Any]:
    """Instantiate Lightning loggers from one ``{class, args}`` entry or a list of them."""
    if not logger_configs:
        return []
    if hasattr(logger_configs, "keys"):
        logger_configs = [logger_configs]

    logger = logging.getLogger("fruitnet.experiment.setup_logging")
    pl_loggers = []
    for logger_cfg in logger_configs:
        if "class" not in logger_cfg:
            raise ValueError(f"pl_logger entry needs a 'class': {logger_cfg}")
        logger_cls = import_class(logger_cfg["class"])
        pl_loggers.append(logger_cls(**logger_cfg.get("args", {})))
        logger.info(f"Created PyTorch Lightning logger: {logger_cfg['class']}")
    return pl_loggers


def setup_logging(cfg: DictConfig) -> Optional[List[Any]]:
    """Configure logging from ``cfg.log_level`` and ``cfg.paths.log_dir``.

    Returns:
        List of PyTorch Lightning loggers or None if no loggers configured.
    """
    level_name = str(cfg.get("log_level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    log_file = configure_root_logger(level, cfg.paths.log_dir)

    logger = logging.getLogger("fruitnet.experiment.setup_logging")
    logger.info(f"Log level set to: {level_name}")
    logger.info(f"Logging to console and file: {log_file}")

    return create_pl_loggers(cfg.get("pl_logger")) or None
