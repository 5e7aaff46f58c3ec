"""Data models for transaction deduplication and pending reconciliation."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional


def coerce_date(value: Any) -> date:
    """
    Normalize a date-like value to a calendar date.

    Args:
        value: date, datetime or ISO-8601 string ("2025-08-15" or
            "2025-08-15T10:00:00Z")

    Returns:
        Calendar date with any time component dropped
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def coerce_amount(value: Any) -> Decimal:
    """Convert an amount to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Transaction:
    """
    A single statement transaction as seen by the engine.

    Dates and amounts are normalized on construction so callers may pass
    ISO strings and floats straight from an extraction step.
    """

    date: date
    merchant: str
    amount: Decimal
    category: Optional[str] = None
    description: Optional[str] = None
    is_pending: bool = False

    # Id of the pending transaction this posted transaction replaces
    reconciled_from_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", coerce_date(self.date))
        object.__setattr__(self, "amount", coerce_amount(self.amount))
        if self.merchant is None:
            object.__setattr__(self, "merchant", "")
        object.__setattr__(self, "is_pending", bool(self.is_pending))


@dataclass(frozen=True)
class ExistingTransaction(Transaction):
    """A previously stored transaction, owned by the persistence layer."""

    id: str = ""


@dataclass(frozen=True)
class DeduplicationResult:
    """Outcome of a deduplication pass over a new batch."""

    unique_transactions: list[Transaction]
    duplicates_found: int
    duplicate_examples: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ReconciledTransaction:
    """A posted transaction paired with the pending id it supersedes."""

    transaction: Transaction
    reconciled_from_id: str


@dataclass(frozen=True)
class ReconciliationStats:
    """Tallies for a pending/posted reconciliation call."""

    total_new: int = 0
    pending_reconciled: int = 0
    exact_duplicates_skipped: int = 0
    new_pending_added: int = 0
    new_posted_added: int = 0


@dataclass(frozen=True)
class ReconciliationResult:
    """
    Intentions produced by the pending/posted reconciler.

    The caller performs the inserts and deletes; nothing here has been
    persisted.
    """

    transactions_to_insert: list[Transaction]
    pending_ids_to_delete: list[str]
    reconciled_transactions: list[ReconciledTransaction]
    stats: ReconciliationStats

    @property
    def pending_to_insert(self) -> list[Transaction]:
        """New pending transactions scheduled for insertion."""
        return [t for t in self.transactions_to_insert if t.is_pending]

    @property
    def posted_to_insert(self) -> list[Transaction]:
        """New posted transactions scheduled for insertion."""
        return [t for t in self.transactions_to_insert if not t.is_pending]
