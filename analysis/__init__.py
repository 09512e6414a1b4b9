"""
Analysis Engine Module

Portfolio analytics from daily priced holdings:
- Holdings join with prior-row prices and position values
- Per-security horizon returns, weight, volatility, risk-adjusted return
- Weighted portfolio metrics
- Daily returns per security and per major asset class
- Asset-class correlation cross-table
"""

__version__ = "0.1.0"
