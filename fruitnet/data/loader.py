"""
Loading of tab-delimited colour tables into per-category feature tensors.

Every file holds one fruit sub-variety, one row per image, with a header row
naming the columns (e.g. ``Red``, ``Green``, ``Blue``). Column names are
normalized before lookup, so ``" Red "`` and ``red`` refer to the same column.
"""
import logging
import os
import re
from collections import OrderedDict
from typing import Mapping, Sequence

import pandas as pd
import torch

logger = logging.getLogger("fruitnet.data.loader")

_NON_ALNUM = re.compile(r"[^0-9a-z]+")


class ParseError(Exception):
    """Raised when a data file is missing, malformed or lacks a requested column."""


def normalize_column_name(name: str) -> str:
    return _NON_ALNUM.sub("_", str(name).strip().lower()).strip("_")


def read_table(path: str) -> pd.DataFrame:
    """Read one tab-delimited file with a header row, normalizing column names."""
    if not os.path.isfile(path):
        raise ParseError(f"Data file not found: {path}")
    try:
        df = pd.read_csv(path, sep="\t")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ParseError(f"Failed to parse {path}: {e}") from e

    names = [normalize_column_name(c) for c in df.columns]
    # pandas already renames exact duplicates to 'x.1'; normalization can still collide
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ParseError(f"Ambiguous column(s) {duplicates} in {path}: "
                         f"headers {list(df.columns)} normalize to the same name")
    df.columns = names
    logger.debug(f"Read {len(df)} rows from {path}, columns: {list(df.columns)}")
    return df


def load_features(path: str, columns: Sequence[str]) -> torch.Tensor:
    """Select ``columns`` from ``path`` as a float32 tensor of shape (rows, len(columns))."""
    df = read_table(path)
    wanted = [normalize_column_name(c) for c in columns]
    missing = [c for c in wanted if c not in df.columns]
    if missing:
        raise ParseError(f"Column(s) {missing} not found in {path}. Available: {list(df.columns)}")

    selected = df[wanted].apply(pd.to_numeric, errors="coerce")
    if selected.isna().to_numpy().any():
        bad_rows = selected.index[selected.isna().any(axis=1)].tolist()
        raise ParseError(f"Non-numeric or missing values in {path}, rows {bad_rows}")

    return torch.tensor(selected.to_numpy(dtype="float64"), dtype=torch.float32)


def load_category(paths: Sequence[str], columns: Sequence[str]) -> torch.Tensor:
    """Concatenate the selected columns of several files of one category, in order."""
    if not paths:
        raise ParseError("No files given for category")
    return torch.cat([load_features(p, columns) for p in paths], dim=0)


def load_groups(root_dir: str,
                categories: Mapping[str, Sequence[str]],
                columns: Sequence[str]) -> "OrderedDict[str, torch.Tensor]":
    """
    Load every category listed in ``categories``.

    Args:
        root_dir: Directory the file names are relative to.
        categories: Ordered mapping ``category -> [file names]``. The order
                    fixes the class index of every category.
        columns: Feature columns to extract, e.g. ``["red", "blue"]``.

    Returns:
        OrderedDict mapping category name to a (n_samples, len(columns)) tensor.
    """
    groups = OrderedDict()
    for name, files in categories.items():
        if not files:
            raise ParseError(f"Category '{name}' lists no data files")
        paths = [os.path.join(root_dir, f) for f in files]
        group = load_category(paths, columns)
        if group.shape[0] == 0:
            raise ParseError(f"Category '{name}' has no samples in {paths}")
        groups[name] = group
        logger.info(f"Loaded {group.shape[0]} '{name}' samples from {len(paths)} file(s)")
    return groups
