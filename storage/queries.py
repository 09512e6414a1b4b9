"""
Read queries against the holdings store.
Returns raw DataFrames; all analytics happen downstream.
"""

import sqlite3
from datetime import date
from typing import List, Sequence

import pandas as pd


RAW_JOIN_COLUMNS = [
    'customer_id', 'full_name', 'account_open_date', 'account_id',
    'major_asset_class', 'minor_asset_class', 'ticker', 'security_name',
    'quantity', 'date', 'value'
]


def _placeholders(values: Sequence) -> str:
    return ', '.join('?' for _ in values)


def query_holdings_prices(
    conn: sqlite3.Connection,
    customer_ids: Sequence[int],
    start_date: date,
    end_date: date,
    price_type: str
) -> pd.DataFrame:
    """
    Join accounts, customers, holdings, security master and daily prices.

    Inner joins throughout: a holding without a security master entry or
    without a price of the requested type inside the window yields no rows.

    Args:
        conn: SQLite connection
        customer_ids: Customers whose accounts are included
        start_date: First price date (inclusive)
        end_date: Last price date (inclusive)
        price_type: Price type to select (e.g. 'adj_close')

    Returns:
        DataFrame with RAW_JOIN_COLUMNS ordered by ticker, date
    """
    if not customer_ids:
        return pd.DataFrame(columns=RAW_JOIN_COLUMNS)

    query = f"""
        SELECT c.customer_id, c.full_name, a.acct_open_date AS account_open_date,
               a.account_id, s.major_asset_class, s.minor_asset_class,
               h.ticker, s.security_name, h.quantity, p.date, p.value
        FROM accounts a
        JOIN customers c ON c.customer_id = a.client_id
        JOIN holdings h ON h.account_id = a.account_id
        JOIN securities s ON s.ticker = h.ticker
        JOIN daily_prices p ON p.ticker = h.ticker
        WHERE a.client_id IN ({_placeholders(customer_ids)})
          AND date(p.date) >= ? AND date(p.date) <= ?
          AND p.price_type = ?
        ORDER BY h.ticker ASC, p.date ASC, a.account_id ASC
    """
    params = list(customer_ids) + [start_date.isoformat(), end_date.isoformat(), price_type]

    df = pd.read_sql_query(query, conn, params=params)

    if not df.empty:
        df['date'] = pd.to_datetime(df['date'], format='ISO8601').dt.date

    return df


def query_customer_holdings(
    conn: sqlite3.Connection,
    customer_ids: Sequence[int]
) -> pd.DataFrame:
    """
    Query the holdings of the given customers without the price join.

    Used to report holdings that the inner join drops.
    """
    if not customer_ids:
        return pd.DataFrame(columns=['account_id', 'ticker', 'quantity'])

    query = f"""
        SELECT h.account_id, h.ticker, h.quantity
        FROM holdings h
        JOIN accounts a ON a.account_id = h.account_id
        WHERE a.client_id IN ({_placeholders(customer_ids)})
        ORDER BY h.ticker ASC, h.account_id ASC
    """
    return pd.read_sql_query(query, conn, params=list(customer_ids))


def list_price_types(conn: sqlite3.Connection) -> List[str]:
    """Return the distinct price types present in the store."""
    cursor = conn.execute("SELECT DISTINCT price_type FROM daily_prices ORDER BY price_type")
    return [row[0] for row in cursor.fetchall()]
