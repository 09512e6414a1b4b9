"""
Holdings join stage - denormalized per-holding-per-day rows.
Adds normalized asset classes, the prior-row price and position values.
"""

import logging
import sqlite3
from datetime import date
from typing import Dict, Optional, Sequence

import pandas as pd

from ingestion.transforms.normalizers import normalize_asset_classes
from storage.queries import query_holdings_prices, RAW_JOIN_COLUMNS

logger = logging.getLogger(__name__)


JOINED_COLUMNS = RAW_JOIN_COLUMNS + ['prior_value', 'position_value']


def build_joined_rows(
    raw_df: pd.DataFrame,
    aliases: Optional[Dict[str, str]] = None
) -> pd.DataFrame:
    """
    Turn raw joined store rows into Joined Rows.

    prior_value is a lag by one row over each ticker's distinct dates in
    ascending order, not a lag by one calendar day. A ticker held in
    several accounts carries one price per date, so every holding of that
    ticker on a date gets the same prior_value. The first date of each
    ticker has prior_value NaN.

    Args:
        raw_df: Rows shaped like storage.queries.RAW_JOIN_COLUMNS
        aliases: Optional asset-class alias table

    Returns:
        DataFrame with JOINED_COLUMNS ordered by ticker, date, account_id
    """
    if raw_df.empty:
        return pd.DataFrame(columns=JOINED_COLUMNS)

    joined = raw_df.copy()
    joined['major_asset_class'] = normalize_asset_classes(joined['major_asset_class'], aliases)

    prices = (
        joined[['ticker', 'date', 'value']]
        .drop_duplicates(subset=['ticker', 'date'])
        .sort_values(['ticker', 'date'])
        .reset_index(drop=True)
    )
    prices['prior_value'] = prices.groupby('ticker')['value'].shift(1)

    joined = joined.merge(prices[['ticker', 'date', 'prior_value']], on=['ticker', 'date'], how='left')
    joined['position_value'] = joined['quantity'] * joined['value']

    joined = joined.sort_values(['ticker', 'date', 'account_id']).reset_index(drop=True)

    return joined[JOINED_COLUMNS]


def load_joined_rows(
    conn: sqlite3.Connection,
    customer_ids: Sequence[int],
    start_date: date,
    end_date: date,
    price_type: str,
    aliases: Optional[Dict[str, str]] = None
) -> pd.DataFrame:
    """
    Query the store and build Joined Rows for one or more customers.

    Holdings missing a security master entry or a price of the requested
    type inside [start_date, end_date] are excluded, not reported as
    errors.
    """
    raw_df = query_holdings_prices(conn, customer_ids, start_date, end_date, price_type)

    logger.info(
        f"Joined {len(raw_df)} holding-day rows for customers {list(customer_ids)} "
        f"({start_date} to {end_date}, price_type={price_type})"
    )

    return build_joined_rows(raw_df, aliases)
