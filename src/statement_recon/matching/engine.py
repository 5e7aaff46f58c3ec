"""
Duplicate detection and pending/posted reconciliation for statement imports.
Both engines share one two-tier match search: same-day first, then a
date window for pending/posted drift.
"""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence, TypeVar
import logging

from ..config import MatchingConfig, ReconConfig
from ..models.transaction import (
    DeduplicationResult,
    ExistingTransaction,
    ReconciledTransaction,
    ReconciliationResult,
    ReconciliationStats,
    Transaction,
)
from .strategies import MerchantMatcher

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Transaction)

TIER_SAME_DAY = "same_day"
TIER_DATE_WINDOW = "date_window"


def dates_within_window(d1: date, d2: date, days: int) -> bool:
    """True when two calendar dates are at most ``days`` whole days apart."""
    return abs((d1 - d2).days) <= days


def format_transaction(txn: Transaction) -> str:
    """One-line rendering used in diagnostics."""
    return f"{txn.date.isoformat()} | {txn.merchant} | ${txn.amount:.2f}"


class TransactionMatcher:
    """
    Locates the existing transaction that a new transaction duplicates.

    Tier 1 requires the same calendar date; tier 2 accepts dates inside the
    configured window and is only searched when tier 1 finds nothing.
    """

    def __init__(self, config: Optional[MatchingConfig] = None):
        """
        Initialize the matcher.

        Args:
            config: Matching configuration (defaults when omitted)
        """
        self.config = config or MatchingConfig()
        self.merchant_matcher = MerchantMatcher(self.config)
        self.amount_tolerance = Decimal(str(self.config.amount_tolerance))

    def amounts_match(self, a: Transaction, b: Transaction) -> bool:
        """Amounts agree within the currency tolerance (strictly less than)."""
        return abs(a.amount - b.amount) < self.amount_tolerance

    def find_match(
        self, new_txn: Transaction, candidates: Sequence[T]
    ) -> Optional[tuple[T, str]]:
        """
        Find the existing transaction matching ``new_txn``.

        Args:
            new_txn: Incoming transaction
            candidates: Existing transactions, in caller order

        Returns:
            (matched transaction, tier name) or None
        """
        window_matches: list[T] = []

        for existing in candidates:
            if not self.amounts_match(new_txn, existing):
                continue
            if not self.merchant_matcher.match(new_txn.merchant, existing.merchant).is_match:
                continue

            if new_txn.date == existing.date:
                return existing, TIER_SAME_DAY
            if dates_within_window(new_txn.date, existing.date, self.config.date_window_days):
                window_matches.append(existing)

        if not window_matches:
            return None

        if self.config.tie_break == "closest_date":
            # Stable sort keeps caller order among equally close candidates
            window_matches.sort(key=lambda t: abs((new_txn.date - t.date).days))

        return window_matches[0], TIER_DATE_WINDOW


class TransactionDeduplicator:
    """Splits a new batch into unique transactions and duplicates."""

    def __init__(self, config: Optional[ReconConfig] = None):
        self.config = config or ReconConfig()
        self.matcher = TransactionMatcher(self.config.matching)

    def deduplicate(
        self,
        new_transactions: Sequence[Transaction],
        existing_transactions: Sequence[Transaction],
    ) -> DeduplicationResult:
        """
        Classify each new transaction as unique or duplicate.

        Args:
            new_transactions: Incoming batch
            existing_transactions: Previously stored transactions

        Returns:
            Deduplication result preserving the input order of uniques
        """
        logger.info(
            f"Deduplicating {len(new_transactions)} new against "
            f"{len(existing_transactions)} existing transactions"
        )

        unique: list[Transaction] = []
        examples: list[str] = []
        max_examples = self.config.matching.max_duplicate_examples

        for new_txn in new_transactions:
            found = self.matcher.find_match(new_txn, existing_transactions)
            if found is None:
                logger.debug(f"Unique: {format_transaction(new_txn)}")
                unique.append(new_txn)
                continue

            existing, tier = found
            example = f"{format_transaction(new_txn)} - {tier} match"
            logger.debug(f"Duplicate: {example}")
            if len(examples) < max_examples:
                examples.append(example)

        duplicates = len(new_transactions) - len(unique)
        logger.info(f"Deduplication complete: {duplicates} duplicates, {len(unique)} unique")

        return DeduplicationResult(
            unique_transactions=unique,
            duplicates_found=duplicates,
            duplicate_examples=examples,
        )


class PendingReconciler:
    """
    Resolves pending/posted lifecycle transitions for an incoming batch.

    Produces intentions only: which transactions to insert and which
    pending ids the caller should delete.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        self.config = config or ReconConfig()
        self.matcher = TransactionMatcher(self.config.matching)

    def reconcile(
        self,
        new_transactions: Sequence[Transaction],
        existing_transactions: Sequence[ExistingTransaction],
    ) -> ReconciliationResult:
        """
        Reconcile a new batch against stored transactions.

        Args:
            new_transactions: Incoming batch (pending and posted)
            existing_transactions: Stored transactions with ids and pending flags

        Returns:
            Reconciliation result with inserts, deletions and stats
        """
        start_time = datetime.now()
        logger.info(
            f"Starting pending reconciliation: {len(new_transactions)} new, "
            f"{len(existing_transactions)} existing"
        )

        to_insert: list[Transaction] = []
        ids_to_delete: list[str] = []
        reconciled: list[ReconciledTransaction] = []

        pending_reconciled = 0
        duplicates_skipped = 0
        new_pending = 0
        new_posted = 0

        consumed_ids: set[str] = set()

        for new_txn in new_transactions:
            # A pending record already superseded in this call cannot be claimed twice
            candidates = [t for t in existing_transactions if t.id not in consumed_ids]
            found = self.matcher.find_match(new_txn, candidates)

            if found is None:
                to_insert.append(new_txn)
                if new_txn.is_pending:
                    new_pending += 1
                else:
                    new_posted += 1
                logger.debug(f"Insert {'pending' if new_txn.is_pending else 'posted'}: "
                             f"{format_transaction(new_txn)}")
                continue

            existing, tier = found

            if not new_txn.is_pending and existing.is_pending:
                posted = replace(new_txn, reconciled_from_id=existing.id)
                to_insert.append(posted)
                ids_to_delete.append(existing.id)
                consumed_ids.add(existing.id)
                reconciled.append(
                    ReconciledTransaction(transaction=posted, reconciled_from_id=existing.id)
                )
                pending_reconciled += 1
                logger.debug(
                    f"Reconciled pending {existing.id} with posted "
                    f"{format_transaction(new_txn)} ({tier})"
                )
            elif new_txn.is_pending and not existing.is_pending:
                duplicates_skipped += 1
                logger.debug(
                    f"Skipped pending, posted {existing.id} already exists: "
                    f"{format_transaction(new_txn)}"
                )
            else:
                duplicates_skipped += 1
                logger.debug(
                    f"Skipped duplicate of {existing.id}: {format_transaction(new_txn)} ({tier})"
                )

        stats = ReconciliationStats(
            total_new=len(new_transactions),
            pending_reconciled=pending_reconciled,
            exact_duplicates_skipped=duplicates_skipped,
            new_pending_added=new_pending,
            new_posted_added=new_posted,
        )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {pending_reconciled} reconciled, "
            f"{duplicates_skipped} skipped, {new_posted} posted + {new_pending} pending to add"
        )

        return ReconciliationResult(
            transactions_to_insert=to_insert,
            pending_ids_to_delete=ids_to_delete,
            reconciled_transactions=reconciled,
            stats=stats,
        )


def deduplicate(
    new_transactions: Sequence[Transaction],
    existing_transactions: Sequence[Transaction],
) -> DeduplicationResult:
    """Deduplicate with default thresholds."""
    return TransactionDeduplicator().deduplicate(new_transactions, existing_transactions)


def reconcile_pending_transactions(
    new_transactions: Sequence[Transaction],
    existing_transactions: Sequence[ExistingTransaction],
) -> ReconciliationResult:
    """Reconcile pending/posted transactions with default thresholds."""
    return PendingReconciler().reconcile(new_transactions, existing_transactions)
