import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import torch
from torch.utils.data import Dataset

from fruitnet.data.labels import encode_groups
from fruitnet.data.loader import load_groups

logger = logging.getLogger("fruitnet.data.dataset")

DEFAULT_FEATURES = ("red", "blue")


class FruitDataset(Dataset):

    """
    (features, indicator) pairs built from per-variety colour tables:

    root/
      Apple_Golden_1.dat, Apple_Braeburn.dat, ...
      Banana.dat, ...
      Grape_White.dat, ...

    Args:
        root_dir: Directory holding the tab-delimited files.
        categories: Ordered mapping category -> list of file names. Category
                    order defines class indices 1..K.
        features: Names of the feature columns, two or three colours.
    """

    def __init__(self,
                 root_dir: str,
                 categories: Mapping[str, Sequence[str]],
                 features: Optional[Sequence[str]] = None):

        self.root_dir = root_dir
        self.features: List[str] = list(features or DEFAULT_FEATURES)
        self.groups: Dict[str, torch.Tensor] = load_groups(root_dir, categories, self.features)
        self.labels: List[str] = list(self.groups.keys())
        self.x, self.classes, self.y = encode_groups(self.groups)
        logger.info(f"FruitDataset: {len(self)} samples, {len(self.labels)} classes {self.labels}, "
                    f"features {self.features}")


    @property
    def n_features(self) -> int:
        return len(self.features)


    @property
    def n_classes(self) -> int:
        return len(self.labels)


    def __len__(self) -> int:
        return self.x.shape[0]


    def __getitem__(self, index: int) -> Tuple[torch.Tensor, torch.Tensor]:
        return self.x[index], self.y[index]
