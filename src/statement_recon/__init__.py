"""Transaction deduplication, pending reconciliation and fixed-expense detection."""

from .matching import (
    deduplicate,
    extract_core_merchant_name,
    merchants_match,
    reconcile_pending_transactions,
)
from .models import ExistingTransaction, Transaction
from .recurring import (
    compute_rule_score,
    create_merchant_summaries,
    is_ambiguous,
    is_high_confidence_fixed,
    is_high_confidence_not_fixed,
)

__version__ = "0.1.0"

__all__ = [
    "deduplicate",
    "extract_core_merchant_name",
    "merchants_match",
    "reconcile_pending_transactions",
    "ExistingTransaction",
    "Transaction",
    "compute_rule_score",
    "create_merchant_summaries",
    "is_ambiguous",
    "is_high_confidence_fixed",
    "is_high_confidence_not_fixed",
]
