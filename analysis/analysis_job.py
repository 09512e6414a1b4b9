"""
Orchestrated analysis job - holdings store to portfolio analytics.
Queries the store once, runs the pure stages, returns the result frames.
"""

import os
import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Any, List, Optional, Union

import pandas as pd
from dotenv import load_dotenv

from analysis.holdings_join import load_joined_rows
from analysis.security_metrics import compute_security_metrics
from analysis.portfolio_metrics import aggregate_portfolio, NULL_POLICIES
from analysis.daily_returns import compute_daily_returns, compute_asset_class_returns
from analysis.correlation_matrix import compute_correlations, build_cross_table
from analysis.guardrails import check_weights, check_cross_table
from ingestion.transforms.normalizers import load_asset_class_aliases
from storage.queries import query_customer_holdings, list_price_types

load_dotenv()

logger = logging.getLogger(__name__)


DEFAULT_LOOKBACK_DAYS = 730


def _default_price_type() -> str:
    return os.getenv('PRICE_TYPE', 'adj_close')


def _default_null_policy() -> str:
    return os.getenv('PORTFOLIO_NULL_POLICY', 'propagate')


@dataclass
class AnalysisConfig:
    """Configuration for one portfolio analysis run."""
    customer_ids: Union[int, List[int]]
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    price_type: str = field(default_factory=_default_price_type)
    null_policy: str = field(default_factory=_default_null_policy)

    def __post_init__(self):
        """Validate and set defaults."""
        if isinstance(self.customer_ids, (int, str)):
            self.customer_ids = [self.customer_ids]
        else:
            self.customer_ids = list(self.customer_ids)

        if not self.customer_ids:
            raise ValueError("customer_ids must not be empty")

        if isinstance(self.start_date, datetime):
            self.start_date = self.start_date.date()

        if isinstance(self.end_date, datetime):
            self.end_date = self.end_date.date()

        if self.end_date is None:
            self.end_date = date.today()

        if self.start_date is None:
            self.start_date = self.end_date - timedelta(days=DEFAULT_LOOKBACK_DAYS)

        if self.start_date > self.end_date:
            raise ValueError("start_date must be <= end_date")

        if not self.price_type or not isinstance(self.price_type, str):
            raise ValueError("price_type must be non-empty string")

        if self.null_policy not in NULL_POLICIES:
            raise ValueError(f"null_policy must be one of {NULL_POLICIES}, got {self.null_policy}")

    @property
    def portfolio_id(self) -> Union[int, str]:
        """Identifier for the portfolio row: the customer, or all customers joined."""
        if len(self.customer_ids) == 1:
            return self.customer_ids[0]
        return ','.join(str(c) for c in self.customer_ids)


def run_portfolio_analysis(
    conn: sqlite3.Connection,
    config: AnalysisConfig,
    aliases: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Run the complete analytics pipeline for the configured customers.

    Pipeline stages:
    1. Join holdings with security master and prices
    2. Per-security returns, weight and risk
    3. Portfolio aggregation
    4. Daily returns per security, then per asset class
    5. Pairwise asset-class correlations and cross-table

    Args:
        conn: SQLite connection to the holdings store
        config: Analysis configuration
        aliases: Asset-class alias table (default: load_asset_class_aliases())

    Returns:
        Dictionary with security_metrics, portfolio_metrics,
        correlation_matrix, daily_returns, asset_class_returns and summary
    """
    start_time = datetime.now()

    if aliases is None:
        aliases = load_asset_class_aliases()

    available_types = list_price_types(conn)
    if config.price_type not in available_types:
        logger.warning(f"Price type {config.price_type!r} not in store (have {available_types})")

    try:
        joined = load_joined_rows(
            conn,
            config.customer_ids,
            config.start_date,
            config.end_date,
            config.price_type,
            aliases
        )

        excluded = _excluded_holdings(conn, config.customer_ids, joined)
        if excluded:
            logger.warning(f"Excluded {len(excluded)} holdings without security or price data: {excluded}")

        if joined.empty:
            logger.warning(f"No holdings data for customers {config.customer_ids}")

        security_metrics = compute_security_metrics(joined)
        check_weights(security_metrics)

        portfolio_metrics = aggregate_portfolio(
            security_metrics,
            customer_id=config.portfolio_id,
            null_policy=config.null_policy
        )

        daily_returns = compute_daily_returns(joined, config.start_date)
        asset_class_returns = compute_asset_class_returns(daily_returns)

        pairs = compute_correlations(asset_class_returns)
        correlation_matrix = build_cross_table(pairs)
        check_cross_table(correlation_matrix)

    except Exception as e:
        logger.error(f"Portfolio analysis failed for customers {config.customer_ids}: {e}")
        raise

    summary = {
        'customer_ids': config.customer_ids,
        'start_date': config.start_date,
        'end_date': config.end_date,
        'price_type': config.price_type,
        'joined_rows': len(joined),
        'tickers': len(security_metrics),
        'daily_return_rows': len(daily_returns),
        'asset_class_dates': len(asset_class_returns),
        'excluded_holdings': excluded,
        'duration_seconds': (datetime.now() - start_time).total_seconds()
    }

    logger.info(
        f"Analysis complete: {summary['tickers']} tickers, "
        f"{summary['asset_class_dates']} dates in {summary['duration_seconds']:.2f}s"
    )

    return {
        'security_metrics': security_metrics,
        'portfolio_metrics': portfolio_metrics,
        'correlation_matrix': correlation_matrix,
        'daily_returns': daily_returns,
        'asset_class_returns': asset_class_returns,
        'summary': summary
    }


def _excluded_holdings(
    conn: sqlite3.Connection,
    customer_ids: List[int],
    joined: pd.DataFrame
) -> List[str]:
    """
    List holdings (as 'account_id:ticker') that produced no joined rows.

    Args:
        conn: SQLite connection
        customer_ids: Customers in scope
        joined: Joined Rows for those customers

    Returns:
        Sorted holding labels dropped by the inner join
    """
    holdings = query_customer_holdings(conn, customer_ids)
    if holdings.empty:
        return []

    matched = set()
    if not joined.empty:
        matched = set(zip(joined['account_id'], joined['ticker']))

    return sorted(
        f"{account_id}:{ticker}"
        for account_id, ticker in zip(holdings['account_id'], holdings['ticker'])
        if (account_id, ticker) not in matched
    )
