"""
Fixed-expense detection pipeline.
Summarizes a history, scores each merchant, accepts or rejects the
confident ones and merges external labels for the ambiguous ones.
"""

from datetime import date
from typing import Mapping, Optional, Sequence
import logging
import statistics

from ..config import ReconConfig
from ..models.merchant import (
    FixedExpense,
    FixedExpenseReport,
    MerchantClassification,
    MerchantSummary,
    ScoreBucket,
    ScoredMerchant,
)
from ..models.transaction import Transaction
from .scoring import RuleScorer
from .subscriptions import build_subscription_candidates, match_subscription_pattern
from .summarizer import MerchantSummarizer, round_half_up

logger = logging.getLogger(__name__)

BIWEEKLY_DAYS = (12, 16)
QUARTERLY_DAYS = (85, 95)


def estimate_monthly_amount(summary: MerchantSummary) -> float:
    """
    Monthly cost implied by a summary.

    Uses the median sample amount, doubled for biweekly cadence and divided
    by three for quarterly cadence.
    """
    amounts = [s.amount for s in summary.sample_transactions]
    if not amounts:
        return 0.0
    monthly = statistics.median(amounts)
    interval = summary.stats.median_interval_days
    if BIWEEKLY_DAYS[0] <= interval <= BIWEEKLY_DAYS[1]:
        monthly *= 2
    elif QUARTERLY_DAYS[0] <= interval <= QUARTERLY_DAYS[1]:
        monthly /= 3
    return round_half_up(monthly, 2)


def create_fixed_expense(
    scored: ScoredMerchant, source: str, is_maybe: bool = False
) -> FixedExpense:
    """Build the fixed-expense record for an accepted merchant."""
    summary = scored.summary
    text = " ".join(
        [summary.original_name] + [s.description for s in summary.sample_transactions]
    )
    return FixedExpense(
        merchant_name=summary.original_name,
        merchant_key=summary.merchant_key,
        monthly_amount=estimate_monthly_amount(summary),
        occurrence_count=summary.stats.count,
        months_tracked=summary.unique_months,
        avg_day_of_month=summary.stats.day_concentration.avg_day,
        last_occurrence_date=summary.last_date,
        source=source,
        score=round(scored.rule_score.score, 2),
        is_maybe=is_maybe,
        is_subscription=match_subscription_pattern(text) is not None,
    )


class FixedExpenseDetector:
    """Runs summarization, scoring and triage over an expense history."""

    def __init__(self, config: Optional[ReconConfig] = None):
        self.config = config or ReconConfig()
        self.summarizer = MerchantSummarizer(self.config.summary)
        self.scorer = RuleScorer(self.config.scoring)

    def score_merchants(self, transactions: Sequence[Transaction]) -> list[ScoredMerchant]:
        """Summaries paired with their rule scores."""
        return [
            ScoredMerchant(summary=summary, rule_score=self.scorer.score(summary))
            for summary in self.summarizer.summarize(transactions)
        ]

    def detect(
        self,
        transactions: Sequence[Transaction],
        classifications: Optional[Mapping[str, MerchantClassification]] = None,
        as_of: Optional[date] = None,
    ) -> FixedExpenseReport:
        """
        Detect fixed expenses in a transaction history.

        Args:
            transactions: Expense history
            classifications: External labels keyed by merchant key, used only
                for ambiguous merchants
            as_of: Reference date for subscription candidates (defaults to
                the latest transaction date)

        Returns:
            Report with accepted expenses, escalations and rejections
        """
        classifications = classifications or {}
        if as_of is None and transactions:
            as_of = max(t.date for t in transactions)

        report = FixedExpenseReport(as_of=as_of)
        report.scored_merchants = self.score_merchants(transactions)

        for scored in report.scored_merchants:
            bucket = scored.bucket
            key = scored.summary.merchant_key

            if bucket is ScoreBucket.HIGH_CONFIDENCE_FIXED:
                report.expenses.append(create_fixed_expense(scored, source="rule"))
                logger.debug(f"{key!r}: fixed by rule ({scored.rule_score.score:.2f})")
            elif bucket is ScoreBucket.HIGH_CONFIDENCE_NOT_FIXED:
                report.rejected.append(scored)
                logger.debug(f"{key!r}: not fixed by rule ({scored.rule_score.score:.2f})")
            elif key in classifications:
                self._apply_classification(report, scored, classifications[key])
            else:
                report.ambiguous.append(scored)
                logger.debug(f"{key!r}: ambiguous ({scored.rule_score.score:.2f})")

        report.expenses.sort(key=lambda e: e.monthly_amount, reverse=True)

        if as_of is not None:
            known = {s.summary.original_name.strip() for s in report.scored_merchants}
            report.subscription_candidates = build_subscription_candidates(
                transactions,
                as_of=as_of,
                lookback_days=self.config.detection.subscription_lookback_days,
                exclude_merchants=known,
            )

        logger.info(
            f"Fixed-expense detection: {len(report.scored_merchants)} merchants scored, "
            f"{len(report.expenses)} fixed, {len(report.ambiguous)} ambiguous, "
            f"{len(report.rejected)} rejected"
        )
        return report

    def _apply_classification(
        self,
        report: FixedExpenseReport,
        scored: ScoredMerchant,
        classification: MerchantClassification,
    ) -> None:
        detection = self.config.detection
        label = classification.label

        if (
            label == "fixed"
            and classification.confidence >= detection.llm_min_confidence
            and classification.reasoning_score >= detection.llm_min_reasoning_score
        ):
            report.expenses.append(create_fixed_expense(scored, source="llm"))
        elif label == "maybe":
            report.expenses.append(
                create_fixed_expense(scored, source="llm_maybe", is_maybe=True)
            )
        else:
            report.rejected.append(scored)

        logger.debug(
            f"{scored.summary.merchant_key!r}: external label {label} "
            f"({classification.confidence:.2f})"
        )
