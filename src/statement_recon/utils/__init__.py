"""Utility modules."""

from .exceptions import (
    StatementReconError,
    TransactionParseError,
    ConfigurationError,
    ReportGenerationError,
)
from .logging_config import level_from_name, setup_logging

__all__ = [
    "StatementReconError",
    "TransactionParseError",
    "ConfigurationError",
    "ReportGenerationError",
    "level_from_name",
    "setup_logging",
]
