"""Custom exceptions for the statement reconciliation package."""


class StatementReconError(Exception):
    """Base exception for statement reconciliation errors."""

    pass


class TransactionParseError(StatementReconError):
    """Error reading a transaction CSV file."""

    pass


class ConfigurationError(StatementReconError):
    """Error in configuration."""

    pass


class ReportGenerationError(StatementReconError):
    """Error generating Excel report."""

    pass
