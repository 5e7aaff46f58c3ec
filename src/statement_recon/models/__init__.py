"""Data models for reconciliation and fixed-expense detection."""

from .transaction import (
    Transaction,
    ExistingTransaction,
    DeduplicationResult,
    ReconciledTransaction,
    ReconciliationStats,
    ReconciliationResult,
)
from .merchant import (
    DayConcentration,
    FixedExpense,
    FixedExpenseReport,
    MerchantClassification,
    MerchantStats,
    MerchantSummary,
    RuleScore,
    SampleTransaction,
    ScoreBucket,
    ScoreComponents,
    ScoredMerchant,
)

__all__ = [
    "Transaction",
    "ExistingTransaction",
    "DeduplicationResult",
    "ReconciledTransaction",
    "ReconciliationStats",
    "ReconciliationResult",
    "DayConcentration",
    "FixedExpense",
    "FixedExpenseReport",
    "MerchantClassification",
    "MerchantStats",
    "MerchantSummary",
    "RuleScore",
    "SampleTransaction",
    "ScoreBucket",
    "ScoreComponents",
    "ScoredMerchant",
]
