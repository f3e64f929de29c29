from omegaconf import DictConfig, OmegaConf
import logging

from hydra.utils import to_absolute_path

from fruitnet.experiment.utils import import_class


def prepare_datasets(cfg: DictConfig):
    """
    Create dataset instances from the ``dataset`` section of the config.

    Each entry names a dataset class, a root directory and a list of split
    instances. Instance ``args`` are merged over the entry's shared ``args``,
    so splits can reuse the feature list and only swap the data files.

    Args:
        cfg: Configuration containing dataset definitions

    Returns:
        dict: Dictionary of created datasets organized by dataset_name and split
              Format: {dataset_name: {split_name: dataset_instance, ...}, ...}
    """
    logger = logging.getLogger("fruitnet.experiment.prepare_datasets")

    created_datasets = {}
    for dataset_name, spec in cfg.dataset.items():
        cls_path = spec.get("class")
        if not cls_path:
            raise ValueError(f"cfg.dataset.{dataset_name}.class is required")
        root_dir = to_absolute_path(spec.get("root_dir") or cfg.paths.data_dir)
        shared_args = spec.get("args", {})
        instances = spec.get("instances") or [{"split": "train"}]

        logger.info(
            "Creating dataset '%s': path=%s, class=%s",
            dataset_name, root_dir, cls_path
        )

        DatasetCls = import_class(cls_path)
        created_datasets[dataset_name] = {}

        for inst in instances:
            split_name = inst.get("split", "train")
            args = OmegaConf.to_container(
                OmegaConf.merge(shared_args, inst.get("args", {})), resolve=True
            )

            ds_obj = DatasetCls(root_dir=root_dir, **args)
            created_datasets[dataset_name][split_name] = ds_obj

            logger.info(
                "Created split '%s' of dataset '%s' with %d samples",
                split_name, dataset_name, len(ds_obj)
            )

    logger.info("Dataset preparation completed")
    return created_datasets
