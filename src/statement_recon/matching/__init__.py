"""Merchant matching, deduplication and pending reconciliation."""

from .normalizer import extract_core_merchant_name
from .strategies import (
    MatchType,
    MerchantMatch,
    MerchantMatcher,
    MerchantMatchStrategy,
    ExactMerchantStrategy,
    CoreNameStrategy,
    ContainmentStrategy,
    SharedPrefixStrategy,
    merchants_match,
)
from .engine import (
    PendingReconciler,
    TransactionDeduplicator,
    TransactionMatcher,
    dates_within_window,
    deduplicate,
    reconcile_pending_transactions,
)

__all__ = [
    "extract_core_merchant_name",
    "MatchType",
    "MerchantMatch",
    "MerchantMatcher",
    "MerchantMatchStrategy",
    "ExactMerchantStrategy",
    "CoreNameStrategy",
    "ContainmentStrategy",
    "SharedPrefixStrategy",
    "merchants_match",
    "PendingReconciler",
    "TransactionDeduplicator",
    "TransactionMatcher",
    "dates_within_window",
    "deduplicate",
    "reconcile_pending_transactions",
]
