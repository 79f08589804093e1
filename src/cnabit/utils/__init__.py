"""Utility functions for cnabit."""

from cnabit.utils.date_parser import parse_date
from cnabit.utils.amount_format import cents_to_decimal, format_brl

__all__ = ["parse_date", "cents_to_decimal", "format_brl"]
