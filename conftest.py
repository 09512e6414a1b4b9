"""
Shared pytest fixtures: an in-memory holdings store seeded with two customers.

Customer 1 holds VTI in two accounts plus GLD, BND, QAI (priced on one
date only) and two holdings the inner join must drop: MISSING (no
security master row) and NOPRICE (no prices). Customer 2 holds VTI only.
"""

import sqlite3
from datetime import date

import pytest

from storage.loaders import (
    init_database,
    upsert_customers,
    upsert_accounts,
    upsert_holdings,
    upsert_securities,
    upsert_prices
)


TRADING_DATES = [
    date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 4),
    date(2024, 1, 5), date(2024, 1, 8)
]

ADJ_CLOSE = {
    'VTI': [100.0, 102.0, 101.0, 104.0, 103.0],
    'GLD': [50.0, 51.0, 50.5, 52.0, 52.0],
    'BND': [80.0, 80.2, 80.1, 80.4, 80.3],
}


def seed_store(conn: sqlite3.Connection) -> None:
    """Seed the holdings store used across test modules."""
    init_database(conn)

    upsert_customers(conn, [
        {'customer_id': 1, 'full_name': 'Ada Byron'},
        {'customer_id': 2, 'full_name': 'Grace Hopper'},
    ])
    upsert_accounts(conn, [
        {'account_id': 10, 'client_id': 1, 'acct_open_date': date(2018, 3, 1)},
        {'account_id': 11, 'client_id': 1, 'acct_open_date': date(2020, 6, 15)},
        {'account_id': 20, 'client_id': 2, 'acct_open_date': date(2021, 1, 4)},
    ])
    upsert_holdings(conn, [
        {'account_id': 10, 'ticker': 'VTI', 'quantity': 10},
        {'account_id': 10, 'ticker': 'GLD', 'quantity': 5},
        {'account_id': 10, 'ticker': 'BND', 'quantity': 20},
        {'account_id': 10, 'ticker': 'MISSING', 'quantity': 3},
        {'account_id': 10, 'ticker': 'NOPRICE', 'quantity': 4},
        {'account_id': 11, 'ticker': 'VTI', 'quantity': 5},
        {'account_id': 11, 'ticker': 'QAI', 'quantity': 8},
        {'account_id': 20, 'ticker': 'VTI', 'quantity': 100},
    ])
    upsert_securities(conn, [
        {'ticker': 'VTI', 'security_name': 'Vanguard Total Stock Market',
         'major_asset_class': 'Equty', 'minor_asset_class': 'US Large Blend'},
        {'ticker': 'GLD', 'security_name': 'SPDR Gold Shares',
         'major_asset_class': 'Commodity', 'minor_asset_class': 'Precious Metals'},
        {'ticker': 'BND', 'security_name': 'Vanguard Total Bond Market',
         'major_asset_class': 'Fixed Income Corporate', 'minor_asset_class': 'Intermediate Core'},
        {'ticker': 'QAI', 'security_name': 'IQ Hedge Multi-Strategy',
         'major_asset_class': 'Alternative', 'minor_asset_class': 'Multistrategy'},
        {'ticker': 'NOPRICE', 'security_name': 'Delisted Fund',
         'major_asset_class': 'equity', 'minor_asset_class': None},
    ])

    price_rows = []
    for ticker, values in ADJ_CLOSE.items():
        for trading_date, value in zip(TRADING_DATES, values):
            price_rows.append({'ticker': ticker, 'date': trading_date, 'price_type': 'adj_close', 'value': value})
            # Raw close differs from adjusted close and must never be picked up
            price_rows.append({'ticker': ticker, 'date': trading_date, 'price_type': 'close', 'value': value + 7})

    price_rows.append({'ticker': 'QAI', 'date': date(2024, 1, 5), 'price_type': 'adj_close', 'value': 30.0})
    # Outside the analysis window
    price_rows.append({'ticker': 'VTI', 'date': date(2023, 12, 29), 'price_type': 'adj_close', 'value': 90.0})

    upsert_prices(conn, price_rows)


@pytest.fixture
def seeded_store():
    """In-memory holdings store with the standard seed."""
    conn = sqlite3.connect(':memory:')
    seed_store(conn)
    yield conn
    conn.close()
