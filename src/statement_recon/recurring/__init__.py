"""Recurring-merchant summarization and fixed-expense scoring."""

from .summarizer import (
    MerchantSummarizer,
    create_merchant_summaries,
    format_merchant_summary_for_llm,
)
from .scoring import (
    RuleScorer,
    compute_rule_score,
    is_ambiguous,
    is_high_confidence_fixed,
    is_high_confidence_not_fixed,
)
from .subscriptions import build_subscription_candidates, match_subscription_pattern
from .detector import FixedExpenseDetector, estimate_monthly_amount

__all__ = [
    "MerchantSummarizer",
    "create_merchant_summaries",
    "format_merchant_summary_for_llm",
    "RuleScorer",
    "compute_rule_score",
    "is_ambiguous",
    "is_high_confidence_fixed",
    "is_high_confidence_not_fixed",
    "build_subscription_candidates",
    "match_subscription_pattern",
    "FixedExpenseDetector",
    "estimate_monthly_amount",
]
