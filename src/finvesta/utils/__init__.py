"""Utility functions for Finvesta."""

from finvesta.utils.amount_parser import parse_amount
from finvesta.utils.date_parser import get_date_range, parse_date
from finvesta.utils.resolvers import resolve_account, resolve_category

__all__ = ["parse_date", "get_date_range", "parse_amount", "resolve_account", "resolve_category"]
