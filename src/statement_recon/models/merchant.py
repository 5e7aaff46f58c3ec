"""Data models for recurring-merchant summaries and fixed-expense scoring."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class ScoreBucket(Enum):
    """Coarse decision derived from a rule score."""

    HIGH_CONFIDENCE_FIXED = "high_confidence_fixed"
    HIGH_CONFIDENCE_NOT_FIXED = "high_confidence_not_fixed"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class DayConcentration:
    """
    How tightly a merchant's charges cluster around one day of the month.

    Rendered as "8/10 within ±3 days of day 15" for display; scoring reads
    the counts directly.
    """

    within: int
    total: int
    avg_day: int
    window: int = 3

    @property
    def ratio(self) -> float:
        """Fraction of transactions inside the window."""
        if self.total == 0:
            return 0.0
        return self.within / self.total

    def __str__(self) -> str:
        return (
            f"{self.within}/{self.total} within ±{self.window} days "
            f"of day {self.avg_day}"
        )


@dataclass(frozen=True)
class SampleTransaction:
    """Representative transaction shown alongside a summary."""

    date: date
    amount: float
    description: str


@dataclass(frozen=True)
class MerchantStats:
    """Statistical fingerprint of one merchant group."""

    count: int
    median_interval_days: int
    interval_cv: float
    day_concentration: DayConcentration
    amount_mean: float
    amount_rstd: float
    flags: tuple[str, ...] = ()


@dataclass(frozen=True)
class MerchantSummary:
    """Compact, immutable description of a recurring merchant."""

    merchant_key: str
    original_name: str
    sample_transactions: tuple[SampleTransaction, ...]
    stats: MerchantStats
    first_date: date
    last_date: date
    unique_months: int


@dataclass(frozen=True)
class ScoreComponents:
    """The four weighted sub-scores behind a rule score."""

    interval_regularity: float
    day_concentration: float
    amount_stability: float
    keyword_bonus: float


@dataclass(frozen=True)
class RuleScore:
    """Deterministic fixed-expense score for a merchant."""

    score: float  # 0.0 to 1.0
    components: ScoreComponents
    interval_multiplier: float = 1.0

    # Bucket thresholds travel with the score so predicates stay pure
    fixed_threshold: float = 0.85
    not_fixed_threshold: float = 0.15

    @property
    def bucket(self) -> ScoreBucket:
        """Decision bucket for this score."""
        if self.score >= self.fixed_threshold:
            return ScoreBucket.HIGH_CONFIDENCE_FIXED
        if self.score <= self.not_fixed_threshold:
            return ScoreBucket.HIGH_CONFIDENCE_NOT_FIXED
        return ScoreBucket.AMBIGUOUS


@dataclass(frozen=True)
class MerchantClassification:
    """Label returned by an external classifier for an ambiguous merchant."""

    merchant_key: str
    label: str  # "fixed", "not_fixed" or "maybe"
    confidence: float
    reasoning_score: float = 0.0
    explain: str = ""


@dataclass(frozen=True)
class FixedExpense:
    """A merchant accepted as a fixed (must-pay) expense."""

    merchant_name: str
    merchant_key: str
    monthly_amount: float
    occurrence_count: int
    months_tracked: int
    avg_day_of_month: int
    last_occurrence_date: date
    source: str  # "rule", "llm", "llm_maybe" or "rule_fallback"
    score: float
    is_maybe: bool = False
    is_subscription: bool = False


@dataclass(frozen=True)
class ScoredMerchant:
    """A summary together with its rule score."""

    summary: MerchantSummary
    rule_score: RuleScore

    @property
    def bucket(self) -> ScoreBucket:
        return self.rule_score.bucket


@dataclass
class FixedExpenseReport:
    """Result of a fixed-expense detection run."""

    expenses: list[FixedExpense] = field(default_factory=list)
    ambiguous: list[ScoredMerchant] = field(default_factory=list)
    rejected: list[ScoredMerchant] = field(default_factory=list)
    scored_merchants: list[ScoredMerchant] = field(default_factory=list)
    subscription_candidates: list[FixedExpense] = field(default_factory=list)
    as_of: Optional[date] = None

    @property
    def total_monthly(self) -> float:
        """Sum of monthly amounts across accepted fixed expenses."""
        return round(sum(e.monthly_amount for e in self.expenses), 2)

    @property
    def counts_by_bucket(self) -> dict[str, int]:
        """Number of scored merchants per decision bucket."""
        counts: dict[str, int] = {}
        for scored in self.scored_merchants:
            key = scored.bucket.value
            counts[key] = counts.get(key, 0) + 1
        return counts
