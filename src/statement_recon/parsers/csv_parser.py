"""
Transaction CSV parser.
Loads statement exports into engine transactions, rejecting rows whose
date or amount cannot be parsed.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional
import logging

import pandas as pd

from ..config import ReconConfig
from ..models.transaction import ExistingTransaction, Transaction
from ..utils.exceptions import TransactionParseError

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "yes", "y", "1", "pending", "t"}


class TransactionCSVParser:
    """Parser for transaction CSV files with configurable column names."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        csv_config = config.input.csv
        self.encoding = csv_config.get("encoding", "utf-8")
        self.delimiter = csv_config.get("delimiter", ",")
        self.date_format = csv_config.get("date_format", "%Y-%m-%d")
        self.column_mappings = csv_config.get("column_mappings", {})

    def parse_file(self, file_path: Path) -> list[Transaction]:
        """
        Parse a CSV file of new transactions.

        Args:
            file_path: Path to the CSV file

        Returns:
            List of transactions

        Raises:
            TransactionParseError: If the file cannot be read
        """
        df = self._read(file_path)
        transactions: list[Transaction] = []

        for idx, row in df.iterrows():
            fields = self._row_fields(row, int(idx))
            if fields is not None:
                transactions.append(Transaction(**fields))

        logger.info(f"Extracted {len(transactions)} transactions from {file_path.name}")
        return transactions

    def parse_existing_file(self, file_path: Path) -> list[ExistingTransaction]:
        """
        Parse a CSV file of stored transactions.

        Rows without an id column value get a positional id.

        Args:
            file_path: Path to the CSV file

        Returns:
            List of existing transactions
        """
        df = self._read(file_path)
        id_col = self.column_mappings.get("id", "id")
        transactions: list[ExistingTransaction] = []

        for idx, row in df.iterrows():
            fields = self._row_fields(row, int(idx))
            if fields is None:
                continue
            txn_id = self._text(row.get(id_col)) or f"ROW-{int(idx) + 1:05d}"
            transactions.append(ExistingTransaction(id=txn_id, **fields))

        logger.info(
            f"Extracted {len(transactions)} existing transactions from {file_path.name}"
        )
        return transactions

    def _read(self, file_path: Path) -> pd.DataFrame:
        logger.info(f"Parsing transaction CSV file: {file_path}")
        try:
            df = pd.read_csv(
                file_path,
                encoding=self.encoding,
                delimiter=self.delimiter,
                dtype=str,
                keep_default_na=False,
            )
        except Exception as e:
            logger.error(f"Failed to read CSV file: {e}")
            raise TransactionParseError(f"Failed to read CSV file {file_path}: {e}") from e

        missing = [
            self.column_mappings.get(name, name)
            for name in ("date", "merchant", "amount")
            if self.column_mappings.get(name, name) not in df.columns
        ]
        if missing:
            raise TransactionParseError(
                f"{file_path.name} is missing required columns: {', '.join(missing)}"
            )
        return df

    def _row_fields(self, row: pd.Series, idx: int) -> Optional[dict[str, Any]]:
        """
        Extract constructor fields from a row.

        Returns:
            Field dictionary or None if the row is invalid
        """
        mappings = self.column_mappings

        txn_date = self._parse_date(row.get(mappings.get("date", "date")))
        if txn_date is None:
            logger.warning(f"Row {idx}: Invalid date, skipping")
            return None

        amount = self._parse_amount(row.get(mappings.get("amount", "amount")))
        if amount is None:
            logger.warning(f"Row {idx}: Invalid amount, skipping")
            return None

        return {
            "date": txn_date,
            "merchant": self._text(row.get(mappings.get("merchant", "merchant"))) or "",
            "amount": amount,
            "category": self._text(row.get(mappings.get("category", "category"))),
            "description": self._text(row.get(mappings.get("description", "description"))),
            "is_pending": self._parse_flag(row.get(mappings.get("is_pending", "is_pending"))),
        }

    def _parse_date(self, date_value) -> Optional[date]:
        """
        Parse a date value from the CSV.

        Args:
            date_value: Date string

        Returns:
            Python date object or None
        """
        text = self._text(date_value)
        if not text:
            return None

        try:
            return datetime.strptime(text, self.date_format).date()
        except ValueError:
            # Try pandas parser as fallback
            try:
                parsed = pd.to_datetime(text)
            except (ValueError, TypeError):
                return None
            if pd.isna(parsed):
                return None
            return parsed.date()

    def _parse_amount(self, amount_value) -> Optional[Decimal]:
        """
        Parse an amount value from the CSV.

        Handles currency symbols, thousands separators and (parenthesized)
        negatives.
        """
        text = self._text(amount_value)
        if not text:
            return None

        negative = text.startswith("(") and text.endswith(")")
        text = text.strip("()").replace("$", "").replace(",", "").strip()

        try:
            amount = Decimal(text)
        except (InvalidOperation, ValueError):
            return None
        if not amount.is_finite():
            return None
        return -abs(amount) if negative else amount

    @staticmethod
    def _parse_flag(value) -> bool:
        text = TransactionCSVParser._text(value)
        return bool(text) and text.lower() in _TRUE_VALUES

    @staticmethod
    def _text(value) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str) and pd.isna(value):
            return None
        text = str(value).strip()
        return text or None
