"""Utility functions for finflow."""

from finflow.utils.date_parser import parse_date, get_date_range
from finflow.utils.amount_parser import parse_amount, to_money

__all__ = ["parse_date", "get_date_range", "parse_amount", "to_money"]
