"""
Guardrails for analysis engine - consistency checks on stage outputs.
"""

import numpy as np
import pandas as pd


class DataQualityError(Exception):
    """Raised when a stage output violates an invariant."""
    pass


def check_weights(security_metrics_df: pd.DataFrame, tolerance: float = 1e-9) -> None:
    """
    Verify security weights sum to 1.

    Raises:
        DataQualityError: If a non-empty weight column does not sum to 1
    """
    if security_metrics_df.empty:
        return

    total = float(security_metrics_df['weight'].sum())
    if abs(total - 1.0) > tolerance:
        raise DataQualityError(f"Security weights sum to {total}, expected 1.0")


def check_cross_table(matrix: pd.DataFrame, tolerance: float = 1e-12) -> None:
    """
    Verify the correlation cross-table is square, symmetric with a unit diagonal.

    NaN cells are allowed as long as their mirror cell is NaN too.

    Raises:
        DataQualityError: If any invariant fails
    """
    if list(matrix.index) != list(matrix.columns):
        raise DataQualityError("Correlation matrix rows and columns differ")

    values = matrix.to_numpy(dtype=float)

    diagonal = np.diag(values)
    if not np.allclose(diagonal, 1.0, atol=tolerance):
        raise DataQualityError(f"Correlation matrix diagonal is not 1: {diagonal.tolist()}")

    mirrored = values.T
    nan_mismatch = np.isnan(values) != np.isnan(mirrored)
    if nan_mismatch.any():
        raise DataQualityError("Correlation matrix null cells are not symmetric")

    both = ~np.isnan(values)
    if not np.allclose(values[both], mirrored[both], atol=tolerance):
        raise DataQualityError("Correlation matrix is not symmetric")
