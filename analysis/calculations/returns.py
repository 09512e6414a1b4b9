"""
Returns calculation utilities.
Pure functions for daily simple returns and horizon-scaled mean returns.
"""

import math
import numpy as np
from typing import Dict, Sequence


# Trading-day counts per horizon. Empirical constants, not calendar-exact.
HORIZON_DAYS = {
    '12m': 250,
    '18m': 375,
    '24m': 500,
}


class ReturnsError(Exception):
    """Raised when returns calculation fails."""
    pass


def simple_returns(values: Sequence[float], prior_values: Sequence[float]) -> np.ndarray:
    """
    Calculate simple returns of each value against its prior value.

    Formula: r_t = (V_t - V_{t-1}) / V_{t-1}

    A missing or zero prior value yields NaN for that position.

    Args:
        values: Current values
        prior_values: Prior values aligned with values

    Returns:
        Numpy array of simple returns, same length as values

    Raises:
        ReturnsError: If the inputs differ in length

    Example:
        [102, 101, 104] against [100, 102, 101] -> [0.02, -0.0098039, 0.0297030]
    """
    values_array = np.asarray(values, dtype=float)
    prior_array = np.asarray(prior_values, dtype=float)

    if values_array.shape != prior_array.shape:
        raise ReturnsError(
            f"Length mismatch: {len(values_array)} values vs {len(prior_array)} prior values"
        )

    prior_array = np.where(prior_array == 0, np.nan, prior_array)
    return (values_array - prior_array) / prior_array


def horizon_return(sample: Sequence[float], horizon_days: int) -> float:
    """
    Mean daily return scaled by sqrt(horizon_days).

    Args:
        sample: Daily simple returns
        horizon_days: Trading-day count for the horizon (e.g. 250)

    Returns:
        Scaled mean return, or NaN for an empty sample
    """
    if horizon_days <= 0:
        raise ReturnsError("Horizon must be positive")

    if len(sample) == 0:
        return float('nan')

    return float(np.mean(sample) * math.sqrt(horizon_days))


def calculate_horizon_returns(
    sample: Sequence[float],
    horizons: Dict[str, int] = HORIZON_DAYS
) -> Dict[str, float]:
    """
    Calculate scaled mean returns for every horizon.

    Returns:
        Dictionary mapping 'return_<horizon>' to value (NaN if no sample)
    """
    return {f"return_{name}": horizon_return(sample, days) for name, days in horizons.items()}
