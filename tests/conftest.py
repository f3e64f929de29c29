import logging
import os

import matplotlib
import pytest
import torch

matplotlib.use("Agg")

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
PROJECT_DIR = os.path.join(REPO_ROOT, "projects", "fruits")
DATA_DIR = os.path.join(PROJECT_DIR, "data")

APPLES = [(0.9, 0.1), (0.85, 0.15), (0.95, 0.05)]
BANANAS = [(0.9, 0.9), (0.85, 0.95), (0.95, 0.85)]
GRAPES = [(0.1, 0.5), (0.15, 0.45), (0.05, 0.55)]


def write_table(path, header, rows):
    with open(path, "w") as f:
        f.write("\t".join(header) + "\n")
        for row in rows:
            f.write("\t".join(str(v) for v in row) + "\n")
    return str(path)


@pytest.fixture
def synthetic_groups():
    return {
        "apple": torch.tensor(APPLES),
        "banana": torch.tensor(BANANAS),
        "grape": torch.tensor(GRAPES),
    }


@pytest.fixture
def synthetic_pairs(synthetic_groups):
    """(sample, indicator) pairs for 3 apples, 3 bananas and 3 grapes, in that order."""
    pairs = []
    for k, points in enumerate(synthetic_groups.values()):
        target = torch.zeros(3)
        target[k] = 1.0
        pairs.extend((p, target.clone()) for p in points)
    return pairs


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
