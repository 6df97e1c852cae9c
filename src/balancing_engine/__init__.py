"""Balancing Cost Engine: imbalance cost calculation for production portfolios."""

__version__ = "0.1.0"
