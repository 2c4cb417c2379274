"""Utility functions for bankledger."""

from bankledger.utils.date_parser import parse_date, parse_statement_date
from bankledger.utils.amount_parser import parse_amount, find_amount_tokens

__all__ = ["parse_date", "parse_statement_date", "parse_amount", "find_amount_tokens"]
