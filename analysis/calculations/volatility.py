"""
Volatility calculation utilities.
Pure functions for sample standard deviation and risk-adjusted return.
"""

import numpy as np
import math
from typing import Sequence


# Sample standard deviations at or below this are treated as zero variance
ZERO_VARIANCE_TOLERANCE = 1e-12


class VolatilityError(Exception):
    """Raised when volatility calculation fails."""
    pass


def sample_std(sample: Sequence[float]) -> float:
    """
    Sample standard deviation (ddof=1) of daily returns.

    Returns NaN when fewer than 2 observations exist or the sample has
    zero variance.
    """
    if len(sample) < 2:
        return float('nan')

    sample_array = np.asarray(sample, dtype=float)

    if np.any(np.isinf(sample_array)):
        raise VolatilityError("Infinite values not allowed in returns")

    std_dev = float(np.std(sample_array, ddof=1))

    if not math.isfinite(std_dev) or std_dev <= ZERO_VARIANCE_TOLERANCE:
        return float('nan')

    return std_dev


def annualized_sigma(sample: Sequence[float], annualize: int = 250) -> float:
    """
    Sample standard deviation scaled by sqrt(annualize).

    Formula: sigma = std(returns) x sqrt(annualize)

    Args:
        sample: Daily simple returns
        annualize: Trading-day count (250 for the 12 month horizon)

    Returns:
        Scaled volatility, or NaN when undefined
    """
    if annualize <= 0:
        raise VolatilityError("Annualization factor must be positive")

    return sample_std(sample) * math.sqrt(annualize)


def risk_adjusted_return(sample: Sequence[float]) -> float:
    """
    Mean daily return divided by its sample standard deviation.

    Both factors are daily figures, so no annualization applies.
    NaN when the standard deviation is undefined.
    """
    std_dev = sample_std(sample)
    if math.isnan(std_dev):
        return float('nan')

    return float(np.mean(sample)) / std_dev
