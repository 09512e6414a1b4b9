"""
Database loaders - schema and idempotent upsert functions for the holdings store.
Thin IO layer; the analysis pipeline only reads these tables.
"""

import os
import sqlite3
from datetime import date
from typing import Dict, Any, List, Tuple, Sequence

from dotenv import load_dotenv

load_dotenv()


def init_database(conn: sqlite3.Connection) -> None:
    """
    Initialize database with the holdings store tables.
    Idempotent - safe to call multiple times.

    Args:
        conn: SQLite connection
    """
    conn.execute("PRAGMA foreign_keys = ON")

    conn.execute("""
        CREATE TABLE IF NOT EXISTS customers (
            customer_id INTEGER PRIMARY KEY,
            full_name TEXT NOT NULL
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS accounts (
            account_id INTEGER PRIMARY KEY,
            client_id INTEGER NOT NULL REFERENCES customers(customer_id),
            acct_open_date DATE
        )
    """)

    # No foreign key on ticker: holdings may reference securities the
    # master does not know yet, and those rows must be joinable-away.
    conn.execute("""
        CREATE TABLE IF NOT EXISTS holdings (
            account_id INTEGER NOT NULL REFERENCES accounts(account_id),
            ticker TEXT NOT NULL,
            quantity REAL NOT NULL,
            PRIMARY KEY (account_id, ticker)
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS securities (
            ticker TEXT PRIMARY KEY,
            security_name TEXT NOT NULL,
            major_asset_class TEXT,
            minor_asset_class TEXT
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS daily_prices (
            ticker TEXT NOT NULL,
            date DATE NOT NULL,
            price_type TEXT NOT NULL,
            value REAL NOT NULL,
            PRIMARY KEY (ticker, date, price_type)
        )
    """)

    conn.execute("CREATE INDEX IF NOT EXISTS idx_accounts_client ON accounts(client_id)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_holdings_ticker ON holdings(ticker)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_daily_prices_date ON daily_prices(date)")

    conn.commit()


def get_connection(db_path: str = None) -> sqlite3.Connection:
    """
    Get SQLite connection with proper configuration.

    Args:
        db_path: Path to SQLite database file (defaults to PORTFOLIO_DB_PATH)

    Returns:
        Configured SQLite connection
    """
    if db_path is None:
        db_path = os.getenv('PORTFOLIO_DB_PATH', './data/portfolio.db')

    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def _to_db(value: Any) -> Any:
    """Store dates as ISO text so range filters compare lexically."""
    if isinstance(value, date):
        return value.isoformat()
    return value


def _upsert(
    conn: sqlite3.Connection,
    table: str,
    key_columns: Sequence[str],
    value_columns: Sequence[str],
    rows: List[Dict[str, Any]]
) -> Tuple[int, int]:
    """Insert or update rows by primary key, returning (inserted, updated)."""
    if not rows:
        return (0, 0)

    inserted = 0
    updated = 0

    key_clause = ' AND '.join(f"{c} = ?" for c in key_columns)
    all_columns = list(key_columns) + list(value_columns)

    for row in rows:
        keys = tuple(_to_db(row[c]) for c in key_columns)
        values = tuple(_to_db(row.get(c)) for c in value_columns)

        cursor = conn.execute(f"SELECT COUNT(*) FROM {table} WHERE {key_clause}", keys)
        exists = cursor.fetchone()[0] > 0

        if exists:
            if value_columns:
                set_clause = ', '.join(f"{c} = ?" for c in value_columns)
                conn.execute(
                    f"UPDATE {table} SET {set_clause} WHERE {key_clause}",
                    values + keys
                )
            updated += 1
        else:
            placeholders = ', '.join('?' for _ in all_columns)
            conn.execute(
                f"INSERT INTO {table} ({', '.join(all_columns)}) VALUES ({placeholders})",
                keys + values
            )
            inserted += 1

    conn.commit()
    return (inserted, updated)


def upsert_customers(conn: sqlite3.Connection, rows: List[Dict[str, Any]]) -> Tuple[int, int]:
    """Upsert customer rows keyed by customer_id."""
    return _upsert(conn, 'customers', ['customer_id'], ['full_name'], rows)


def upsert_accounts(conn: sqlite3.Connection, rows: List[Dict[str, Any]]) -> Tuple[int, int]:
    """Upsert account rows keyed by account_id."""
    return _upsert(conn, 'accounts', ['account_id'], ['client_id', 'acct_open_date'], rows)


def upsert_holdings(conn: sqlite3.Connection, rows: List[Dict[str, Any]]) -> Tuple[int, int]:
    """Upsert holding rows keyed by (account_id, ticker)."""
    return _upsert(conn, 'holdings', ['account_id', 'ticker'], ['quantity'], rows)


def upsert_securities(conn: sqlite3.Connection, rows: List[Dict[str, Any]]) -> Tuple[int, int]:
    """
    Upsert security master rows keyed by ticker.

    major_asset_class is stored exactly as given; label cleanup happens
    at analysis time.
    """
    return _upsert(
        conn, 'securities', ['ticker'],
        ['security_name', 'major_asset_class', 'minor_asset_class'], rows
    )


def upsert_prices(conn: sqlite3.Connection, rows: List[Dict[str, Any]]) -> Tuple[int, int]:
    """
    Upsert daily price rows.
    Idempotent - can be called multiple times with same data.

    Args:
        conn: SQLite connection
        rows: Dictionaries with ticker, date, price_type and value

    Returns:
        Tuple of (inserted_count, updated_count)
    """
    return _upsert(conn, 'daily_prices', ['ticker', 'date', 'price_type'], ['value'], rows)
