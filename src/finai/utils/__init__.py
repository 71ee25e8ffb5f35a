"""Utility functions for finai."""

from finai.utils.date_parser import parse_date
from finai.utils.amount_parser import parse_amount, format_money

__all__ = ["parse_date", "parse_amount", "format_money"]
