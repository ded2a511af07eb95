"""Utility functions for microcompta."""

from microcompta.utils.date_parser import parse_date, parse_month
from microcompta.utils.amount_parser import parse_amount
from microcompta.utils.money import format_amount, to_decimal

__all__ = ["parse_date", "parse_month", "parse_amount", "format_amount", "to_decimal"]
