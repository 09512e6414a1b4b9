"""
Correlation calculation utilities.
Pearson correlation over pairwise-complete observations using raw moments.
"""

import math
import numpy as np
from typing import Sequence


# Relative tolerance for treating n*sum(x^2) - sum(x)^2 as zero
DEGENERATE_TOLERANCE = 1e-12


def pearson_pairwise(
    x: Sequence[float],
    y: Sequence[float],
    decimals: int = 3
) -> float:
    """
    Pearson correlation of two aligned series, pairwise-complete.

    Only positions where BOTH x and y are non-null contribute to n and
    every sum. Formula:

        r = (n*Sxy - Sx*Sy) / (sqrt(n*Sxx - Sx^2) * sqrt(n*Syy - Sy^2))

    Args:
        x: First series (NaN/None for missing)
        y: Second series aligned with x
        decimals: Rounding applied to the coefficient

    Returns:
        Rounded coefficient, or NaN when either series is constant over
        the overlap (including an empty or single-point overlap)
    """
    x_array = np.asarray(x, dtype=float)
    y_array = np.asarray(y, dtype=float)

    if x_array.shape != y_array.shape:
        raise ValueError(f"Series length mismatch: {x_array.shape} vs {y_array.shape}")

    complete = ~(np.isnan(x_array) | np.isnan(y_array))
    xs = x_array[complete]
    ys = y_array[complete]

    n = len(xs)
    if n == 0:
        return float('nan')

    sum_x = xs.sum()
    sum_y = ys.sum()
    sum_xy = (xs * ys).sum()
    sum_xx = (xs * xs).sum()
    sum_yy = (ys * ys).sum()

    var_x = n * sum_xx - sum_x ** 2
    var_y = n * sum_yy - sum_y ** 2

    if var_x <= DEGENERATE_TOLERANCE * n * sum_xx or var_y <= DEGENERATE_TOLERANCE * n * sum_yy:
        return float('nan')

    r = (n * sum_xy - sum_x * sum_y) / (math.sqrt(var_x) * math.sqrt(var_y))

    return round(float(r), decimals)
