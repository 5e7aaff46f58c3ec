"""
Deterministic fixed-expense scoring.

A merchant fingerprint is turned into a 0-1 score from four components:

    interval regularity  35%   low interval CV -> regular cadence
    day concentration    25%   charges cluster on one day of the month
    amount stability     25%   low relative std dev of amounts
    keyword bonus        15%   bill / utility / loan / subscription wording

The weighted sum is scaled by a cadence multiplier (monthly cadence keeps
the full score, weekly cadence keeps a fifth of it). Scores at or above
0.85 are treated as fixed without further review, scores at or below 0.15
as not fixed, and everything in between is ambiguous.
"""

from typing import Iterable, Optional

from ..config import ScoringConfig
from ..models.merchant import (
    DayConcentration,
    MerchantSummary,
    RuleScore,
    ScoreBucket,
    ScoreComponents,
)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _descending_ramp(value: float, full_below: float, zero_above: float) -> float:
    """1.0 below ``full_below``, 0.0 above ``zero_above``, linear in between."""
    if value < full_below:
        return 1.0
    if value > zero_above:
        return 0.0
    return clamp(1.0 - (value - full_below) / (zero_above - full_below))


class RuleScorer:
    """Scores merchant summaries as fixed-expense candidates."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        """
        Initialize the scorer.

        Args:
            config: Scoring weights, bands and thresholds
        """
        self.config = config or ScoringConfig()

    def score_interval_regularity(self, interval_cv: float) -> float:
        return _descending_ramp(
            interval_cv, self.config.interval_cv_full, self.config.interval_cv_zero
        )

    def score_day_concentration(self, concentration: DayConcentration) -> float:
        floor = self.config.concentration_floor
        ratio = concentration.ratio
        if ratio < floor:
            return 0.0
        return clamp((ratio - floor) / (1.0 - floor))

    def score_amount_stability(self, amount_rstd: float) -> float:
        return _descending_ramp(
            amount_rstd, self.config.amount_rstd_full, self.config.amount_rstd_zero
        )

    def keyword_bonus(self, flags: Iterable[str]) -> float:
        """Highest single tier among the flags, never additive."""
        tiers = self.config.keyword_tiers
        bonus = max((tiers.get(flag, 0.0) for flag in flags), default=0.0)
        return clamp(min(bonus, self.config.keyword_bonus_cap))

    def interval_multiplier(self, median_interval_days: int) -> float:
        """Multiplier for the first cadence band containing the median interval."""
        for band in self.config.interval_bands:
            if band.min_days <= median_interval_days <= band.max_days:
                return band.multiplier
        return self.config.default_multiplier

    def score(self, summary: MerchantSummary) -> RuleScore:
        """
        Compute the rule score for a merchant summary.

        Args:
            summary: Merchant fingerprint

        Returns:
            Score in [0, 1] with its components
        """
        stats = summary.stats
        components = ScoreComponents(
            interval_regularity=self.score_interval_regularity(stats.interval_cv),
            day_concentration=self.score_day_concentration(stats.day_concentration),
            amount_stability=self.score_amount_stability(stats.amount_rstd),
            keyword_bonus=self.keyword_bonus(stats.flags),
        )

        weights = self.config.weights
        base_score = (
            weights.interval_regularity * components.interval_regularity
            + weights.day_concentration * components.day_concentration
            + weights.amount_stability * components.amount_stability
            + weights.keyword_bonus * components.keyword_bonus
        )
        multiplier = self.interval_multiplier(stats.median_interval_days)

        return RuleScore(
            score=clamp(base_score * multiplier),
            components=components,
            interval_multiplier=multiplier,
            fixed_threshold=self.config.fixed_threshold,
            not_fixed_threshold=self.config.not_fixed_threshold,
        )


_DEFAULT_SCORER = RuleScorer()


def compute_rule_score(summary: MerchantSummary) -> RuleScore:
    """Score a summary with the default weights and thresholds."""
    return _DEFAULT_SCORER.score(summary)


def is_high_confidence_fixed(rule_score: RuleScore) -> bool:
    return rule_score.bucket is ScoreBucket.HIGH_CONFIDENCE_FIXED


def is_high_confidence_not_fixed(rule_score: RuleScore) -> bool:
    return rule_score.bucket is ScoreBucket.HIGH_CONFIDENCE_NOT_FIXED


def is_ambiguous(rule_score: RuleScore) -> bool:
    """Only ambiguous merchants should be escalated to an external classifier."""
    return rule_score.bucket is ScoreBucket.AMBIGUOUS
