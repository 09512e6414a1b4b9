"""
Per-security return and risk metrics.
Pure function over Joined Rows; one output row per ticker.
"""

import logging

import numpy as np
import pandas as pd

from analysis.calculations.returns import HORIZON_DAYS, calculate_horizon_returns, simple_returns
from analysis.calculations.volatility import annualized_sigma, risk_adjusted_return

logger = logging.getLogger(__name__)


SECURITY_METRICS_COLUMNS = [
    'ticker', 'security_name', 'major_asset_class',
    'return_12m', 'return_18m', 'return_24m',
    'weight', 'sigma_12m', 'risk_adjusted_return_12m'
]


def return_samples(joined_df: pd.DataFrame) -> pd.DataFrame:
    """
    Daily simple return sample per ticker.

    One observation per (ticker, date) with a defined prior_value, so a
    ticker's sample has one fewer element than its distinct dates.

    Returns:
        DataFrame with ticker, date, return_1d ordered by ticker, date
    """
    prices = (
        joined_df[['ticker', 'date', 'value', 'prior_value']]
        .drop_duplicates(subset=['ticker', 'date'])
        .dropna(subset=['prior_value'])
        .sort_values(['ticker', 'date'])
    )

    samples = prices[['ticker', 'date']].copy()
    samples['return_1d'] = simple_returns(prices['value'], prices['prior_value'])

    return samples.dropna(subset=['return_1d']).reset_index(drop=True)


def compute_security_metrics(joined_df: pd.DataFrame) -> pd.DataFrame:
    """
    Aggregate Joined Rows into one metrics row per ticker.

    - return_12m/18m/24m: mean daily return x sqrt(250/375/500)
    - weight: ticker position value over the position value of all rows
    - sigma_12m: sample std of daily returns x sqrt(250)
    - risk_adjusted_return_12m: mean / std of daily returns, unscaled

    Tickers with no return sample (held on a single date) still get a
    weight; their return and risk metrics are NaN.

    Args:
        joined_df: Output of analysis.holdings_join.build_joined_rows

    Returns:
        DataFrame with SECURITY_METRICS_COLUMNS sorted by return_12m descending
    """
    if joined_df.empty:
        return pd.DataFrame(columns=SECURITY_METRICS_COLUMNS)

    # First pass: grand total across every ticker
    total_position_value = joined_df['position_value'].sum()

    samples = return_samples(joined_df)
    samples_by_ticker = {
        ticker: group['return_1d'].to_numpy()
        for ticker, group in samples.groupby('ticker', sort=False)
    }

    rows = []
    for ticker, group in joined_df.groupby('ticker', sort=True):
        sample = samples_by_ticker.get(ticker, np.array([], dtype=float))

        if total_position_value != 0:
            weight = group['position_value'].sum() / total_position_value
        else:
            weight = float('nan')

        row = {
            'ticker': ticker,
            'security_name': group['security_name'].iloc[0],
            'major_asset_class': group['major_asset_class'].iloc[0],
            'weight': weight,
            'sigma_12m': annualized_sigma(sample, annualize=HORIZON_DAYS['12m']),
            'risk_adjusted_return_12m': risk_adjusted_return(sample),
        }
        row.update(calculate_horizon_returns(sample))

        logger.debug(f"{ticker}: {len(sample)} daily returns, weight={weight:.6f}")
        rows.append(row)

    metrics = pd.DataFrame(rows, columns=SECURITY_METRICS_COLUMNS)
    metrics = metrics.sort_values('return_12m', ascending=False, na_position='last', kind='mergesort')

    return metrics.reset_index(drop=True)
