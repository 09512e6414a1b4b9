"""
Portfolio aggregation - weight security metrics into a single row.
"""

import logging
import math
from typing import Union

import pandas as pd

logger = logging.getLogger(__name__)


PORTFOLIO_COLUMNS = ['customer_id', 'return_12m', 'sigma_12m', 'risk_adjusted_return_12m']
PORTFOLIO_METRICS = ['return_12m', 'sigma_12m', 'risk_adjusted_return_12m']

NULL_POLICIES = ('propagate', 'skip')


def weighted_sum(values: pd.Series, weights: pd.Series, null_policy: str = 'propagate') -> float:
    """
    Sum of value x weight with explicit null handling.

    Args:
        values: Metric per security
        weights: Portfolio weight per security (aligned with values)
        null_policy: 'propagate' - any missing term makes the sum NaN;
            'skip' - missing terms are dropped and the remaining weights
            rescaled to sum to 1

    Returns:
        Weighted sum, or NaN
    """
    if null_policy not in NULL_POLICIES:
        raise ValueError(f"Unknown null policy: {null_policy}")

    terms = values * weights

    if null_policy == 'propagate':
        if terms.empty or terms.isna().any():
            return float('nan')
        return float(terms.sum())

    present = terms.notna()
    if not present.any():
        return float('nan')

    kept_weight = weights[present].sum()
    if kept_weight == 0 or math.isnan(kept_weight):
        return float('nan')

    return float(terms[present].sum() / kept_weight)


def aggregate_portfolio(
    security_metrics_df: pd.DataFrame,
    customer_id: Union[int, str],
    null_policy: str = 'propagate'
) -> pd.DataFrame:
    """
    Aggregate security metrics into one portfolio metrics row.

    portfolio metric = sum(metric_i x weight_i) for return_12m, sigma_12m
    and risk_adjusted_return_12m.

    Args:
        security_metrics_df: Output of compute_security_metrics
        customer_id: Identifier placed on the output row
        null_policy: See weighted_sum

    Returns:
        Single-row DataFrame with PORTFOLIO_COLUMNS
    """
    weights = security_metrics_df['weight'].astype(float)

    row = {'customer_id': customer_id}
    for metric in PORTFOLIO_METRICS:
        row[metric] = weighted_sum(
            security_metrics_df[metric].astype(float),
            weights,
            null_policy
        )

    logger.info(
        f"Aggregated {len(security_metrics_df)} securities for portfolio {customer_id} "
        f"(null_policy={null_policy}): return_12m={row['return_12m']:.6f}"
    )

    return pd.DataFrame([row], columns=PORTFOLIO_COLUMNS)
