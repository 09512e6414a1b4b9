"""
Asset-class correlation stage and cross-table.
"""

import logging
from itertools import combinations
from typing import Dict, Sequence, Tuple

import numpy as np
import pandas as pd

from analysis.calculations.correlation import pearson_pairwise
from ingestion.transforms.normalizers import CANONICAL_ASSET_CLASSES

logger = logging.getLogger(__name__)


def compute_correlations(
    asset_class_df: pd.DataFrame,
    asset_classes: Sequence[str] = CANONICAL_ASSET_CLASSES,
    decimals: int = 3
) -> Dict[Tuple[str, str], float]:
    """
    Pearson correlation for every unordered pair of asset classes.

    Args:
        asset_class_df: Output of compute_asset_class_returns
        asset_classes: Class order; pairs follow itertools.combinations
        decimals: Rounding for each coefficient

    Returns:
        Dictionary mapping (class_a, class_b) to coefficient (NaN if undefined)
    """
    pairs = {}

    for class_a, class_b in combinations(asset_classes, 2):
        column_a = f"return_{class_a}"
        column_b = f"return_{class_b}"

        if asset_class_df.empty:
            pairs[(class_a, class_b)] = float('nan')
            continue

        coefficient = pearson_pairwise(
            asset_class_df[column_a].astype(float),
            asset_class_df[column_b].astype(float),
            decimals=decimals
        )
        pairs[(class_a, class_b)] = coefficient

        if np.isnan(coefficient):
            logger.debug(f"Correlation undefined for {class_a}/{class_b}")

    return pairs


def build_cross_table(
    pairs: Dict[Tuple[str, str], float],
    asset_classes: Sequence[str] = CANONICAL_ASSET_CLASSES
) -> pd.DataFrame:
    """
    Symmetric correlation matrix from pairwise coefficients.

    Rows and columns follow asset_classes; the diagonal is 1.0 and each
    off-diagonal cell is looked up under either orientation of the pair.
    """
    classes = list(asset_classes)
    matrix = pd.DataFrame(np.nan, index=classes, columns=classes, dtype=float)

    for row_class in classes:
        for column_class in classes:
            if row_class == column_class:
                matrix.loc[row_class, column_class] = 1.0
            else:
                matrix.loc[row_class, column_class] = pairs.get(
                    (row_class, column_class),
                    pairs.get((column_class, row_class), float('nan'))
                )

    matrix.index.name = 'asset_class'
    return matrix
