"""Parsers for transaction CSV exports."""

from .csv_parser import TransactionCSVParser

__all__ = ["TransactionCSVParser"]
