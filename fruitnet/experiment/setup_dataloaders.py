"""
DataLoader setup functionality for experiments.
"""
import logging
from omegaconf import OmegaConf
from torch.utils.data import DataLoader

SPLIT_ARGS = {
    "train": "train_args",
    "test": "test_args",
}


def setup_dataloaders(datasets_dict, dataloader_cfg, splits=None):
    """Create PyTorch DataLoaders from datasets for specified splits.

    Per-sample training uses ``train_args: {batch_size: 1, shuffle: true}``;
    each epoch then visits the dataset in a fresh order, one update per sample.

    Args:
        datasets_dict: Dictionary of datasets organized by dataset_name -> split_name -> dataset
        dataloader_cfg: Configuration for DataLoader parameters
        splits: List of dataset splits to create dataloaders for (e.g., ['train', 'test']).
                If None, creates dataloaders for all available splits.

    Returns:
        Dictionary of dataloaders organized by dataset_name -> split_name -> dataloader
    """
    logger = logging.getLogger("fruitnet.experiment.setup_dataloaders")
    dataloaders = {}

    requested = set(splits) if splits is not None else None

    for dataset_name, dataset_splits in datasets_dict.items():
        dataloaders[dataset_name] = {}

        for split_name, dataset in dataset_splits.items():
            if requested is not None and split_name not in requested:
                logger.debug(f"Skipping {split_name} dataloader for {dataset_name} (not in requested splits: {splits})")
                continue

            if split_name not in SPLIT_ARGS:
                raise ValueError(f"Unsupported split name '{split_name}' for dataset '{dataset_name}'")
            dl_args = dataloader_cfg.get(SPLIT_ARGS[split_name], {})
            if OmegaConf.is_config(dl_args):
                dl_args = OmegaConf.to_container(dl_args, resolve=True)

            dataloaders[dataset_name][split_name] = DataLoader(dataset, **dl_args)

            logger.info(f"Created {split_name} dataloader for {dataset_name}: "
                        f"{len(dataset)} samples, batch_size={dl_args.get('batch_size', 1)}, "
                        f"shuffle={dl_args.get('shuffle', False)}")

    return dataloaders
