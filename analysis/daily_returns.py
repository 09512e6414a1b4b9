"""
Daily return series per security and per major asset class.
"""

import logging
from datetime import date

import pandas as pd

from analysis.calculations.returns import simple_returns
from ingestion.transforms.normalizers import CANONICAL_ASSET_CLASSES

logger = logging.getLogger(__name__)


DAILY_RETURN_COLUMNS = ['ticker', 'major_asset_class', 'date', 'return_1d']
ASSET_CLASS_RETURN_COLUMNS = ['date'] + [f"return_{c}" for c in CANONICAL_ASSET_CLASSES]


def compute_daily_returns(joined_df: pd.DataFrame, window_start: date) -> pd.DataFrame:
    """
    Daily simple return per (ticker, date).

    Only rows dated strictly after window_start are used. Each group's
    return_1d is the mean of (value - prior_value) / prior_value over its
    rows, and groups without a defined return are dropped.

    Args:
        joined_df: Output of analysis.holdings_join.build_joined_rows
        window_start: First date of the analysis window

    Returns:
        DataFrame with DAILY_RETURN_COLUMNS ordered by date, ticker
    """
    if joined_df.empty:
        return pd.DataFrame(columns=DAILY_RETURN_COLUMNS)

    rows = joined_df[joined_df['date'] > window_start].copy()
    if rows.empty:
        return pd.DataFrame(columns=DAILY_RETURN_COLUMNS)

    rows['return_1d'] = simple_returns(rows['value'], rows['prior_value'])

    daily = (
        rows.groupby(['ticker', 'major_asset_class', 'date'], dropna=False)['return_1d']
        .mean()
        .reset_index()
        .dropna(subset=['return_1d'])
        .sort_values(['date', 'ticker'], kind='mergesort')
        .reset_index(drop=True)
    )

    return daily[DAILY_RETURN_COLUMNS]


def compute_asset_class_returns(daily_df: pd.DataFrame) -> pd.DataFrame:
    """
    Cross-sectional mean daily return per canonical asset class.

    One row per distinct date in daily_df. A class with no securities on a
    date is NaN for that date, never zero. Non-canonical classes do not
    get a column.

    Returns:
        DataFrame with ASSET_CLASS_RETURN_COLUMNS ordered by date
    """
    if daily_df.empty:
        return pd.DataFrame(columns=ASSET_CLASS_RETURN_COLUMNS)

    dates = sorted(daily_df['date'].unique())
    result = pd.DataFrame({'date': dates})

    canonical = daily_df[daily_df['major_asset_class'].isin(CANONICAL_ASSET_CLASSES)]
    means = canonical.groupby(['major_asset_class', 'date'])['return_1d'].mean()

    for asset_class in CANONICAL_ASSET_CLASSES:
        if asset_class in means.index.get_level_values(0):
            class_means = means.xs(asset_class, level='major_asset_class')
            result[f"return_{asset_class}"] = result['date'].map(class_means).astype(float)
        else:
            result[f"return_{asset_class}"] = float('nan')

    logger.info(f"Built asset class returns for {len(result)} dates")
    return result[ASSET_CLASS_RETURN_COLUMNS]
