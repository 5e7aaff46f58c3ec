"""Tests for deterministic fixed-expense scoring."""

from datetime import date

import pytest

from statement_recon.config import ScoringConfig
from statement_recon.models import (
    DayConcentration,
    MerchantStats,
    MerchantSummary,
    RuleScore,
    ScoreBucket,
    ScoreComponents,
)
from statement_recon.recurring.scoring import (
    RuleScorer,
    compute_rule_score,
    is_ambiguous,
    is_high_confidence_fixed,
    is_high_confidence_not_fixed,
)


def make_summary(
    interval_cv: float = 0.0,
    concentration: DayConcentration = DayConcentration(within=12, total=12, avg_day=1),
    amount_rstd: float = 0.0,
    flags: tuple = (),
    median_interval_days: int = 30,
) -> MerchantSummary:
    stats = MerchantStats(
        count=concentration.total,
        median_interval_days=median_interval_days,
        interval_cv=interval_cv,
        day_concentration=concentration,
        amount_mean=100.0,
        amount_rstd=amount_rstd,
        flags=flags,
    )
    return MerchantSummary(
        merchant_key="test merchant",
        original_name="TEST MERCHANT",
        sample_transactions=(),
        stats=stats,
        first_date=date(2024, 1, 1),
        last_date=date(2025, 12, 1),
        unique_months=concentration.total,
    )


def score_of(value: float) -> RuleScore:
    return RuleScore(score=value, components=ScoreComponents(0.0, 0.0, 0.0, 0.0))


class TestComputeRuleScore:
    def test_canonical_mortgage_is_fixed(self):
        summary = make_summary(
            interval_cv=0.02,
            concentration=DayConcentration(within=24, total=24, avg_day=1),
            amount_rstd=0.0,
            flags=("loan_mortgage",),
            median_interval_days=30,
        )
        result = compute_rule_score(summary)
        assert result.score == pytest.approx(0.895)
        assert result.components.interval_regularity == 1.0
        assert result.components.day_concentration == 1.0
        assert result.components.amount_stability == 1.0
        assert result.components.keyword_bonus == 0.3
        assert is_high_confidence_fixed(result)

    def test_weekly_variable_purchases_not_fixed(self):
        summary = make_summary(
            interval_cv=0.5,
            concentration=DayConcentration(within=3, total=10, avg_day=14),
            amount_rstd=0.5,
            median_interval_days=7,
        )
        result = compute_rule_score(summary)
        assert result.interval_multiplier == 0.2
        assert result.score <= 0.15
        assert is_high_confidence_not_fixed(result)

    def test_middle_of_the_road_is_ambiguous(self):
        summary = make_summary(
            interval_cv=0.30,
            concentration=DayConcentration(within=3, total=4, avg_day=10),
            amount_rstd=0.20,
            flags=("has_account_number",),
        )
        result = compute_rule_score(summary)
        assert result.score == pytest.approx(0.5087, abs=1e-3)
        assert is_ambiguous(result)

    def test_score_is_clamped(self):
        result = compute_rule_score(make_summary(flags=("utility", "insurance")))
        assert 0.0 <= result.score <= 1.0

    def test_deterministic(self):
        summary = make_summary(interval_cv=0.3, amount_rstd=0.2)
        assert compute_rule_score(summary) == compute_rule_score(summary)


class TestComponents:
    scorer = RuleScorer()

    @pytest.mark.parametrize(
        "cv, expected", [(0.0, 1.0), (0.1, 1.0), (0.15, 1.0), (0.375, 0.5), (0.6, 0.0), (0.9, 0.0)]
    )
    def test_interval_regularity(self, cv, expected):
        assert self.scorer.score_interval_regularity(cv) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "rstd, expected", [(0.0, 1.0), (0.1, 1.0), (0.25, 0.5), (0.4, 0.0), (1.2, 0.0)]
    )
    def test_amount_stability(self, rstd, expected):
        assert self.scorer.score_amount_stability(rstd) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "within, total, expected",
        [(10, 10, 1.0), (8, 10, 0.5), (6, 10, 0.0), (5, 10, 0.0), (0, 0, 0.0)],
    )
    def test_day_concentration(self, within, total, expected):
        concentration = DayConcentration(within=within, total=total, avg_day=15)
        assert self.scorer.score_day_concentration(concentration) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "flags, expected",
        [
            ((), 0.0),
            (("contains_bill_keyword",), 0.1),
            (("contains_bill_keyword", "subscription"), 0.2),
            (("utility", "loan_mortgage", "insurance"), 0.3),
            (("ach_autopay", "has_account_number"), 0.2),
            (("unknown_flag",), 0.0),
        ],
    )
    def test_keyword_bonus_takes_highest_tier(self, flags, expected):
        assert self.scorer.keyword_bonus(flags) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "days, expected",
        [
            (30, 1.0),
            (28, 1.0),
            (32, 1.0),
            (25, 0.8),
            (27, 0.8),
            (35, 0.8),
            (14, 0.7),
            (90, 0.6),
            (7, 0.2),
            (60, 0.3),
            (36, 0.3),
            (0, 0.3),
        ],
    )
    def test_interval_multiplier(self, days, expected):
        assert self.scorer.interval_multiplier(days) == expected


class TestMonotonicity:
    def test_lower_interval_cv_never_scores_lower(self):
        scores = [
            compute_rule_score(make_summary(interval_cv=cv / 100)).score
            for cv in range(80, -1, -5)
        ]
        assert scores == sorted(scores)

    def test_lower_amount_rstd_never_scores_lower(self):
        scores = [
            compute_rule_score(make_summary(amount_rstd=r / 100)).score
            for r in range(60, -1, -5)
        ]
        assert scores == sorted(scores)

    def test_higher_concentration_never_scores_lower(self):
        scores = [
            compute_rule_score(
                make_summary(concentration=DayConcentration(within=w, total=10, avg_day=5))
            ).score
            for w in range(0, 11)
        ]
        assert scores == sorted(scores)


class TestBuckets:
    @pytest.mark.parametrize("value", [i / 100 for i in range(0, 101)])
    def test_exactly_one_bucket(self, value):
        rule_score = score_of(value)
        predicates = [
            is_high_confidence_fixed(rule_score),
            is_high_confidence_not_fixed(rule_score),
            is_ambiguous(rule_score),
        ]
        assert predicates.count(True) == 1

    @pytest.mark.parametrize(
        "value, bucket",
        [
            (0.85, ScoreBucket.HIGH_CONFIDENCE_FIXED),
            (0.849, ScoreBucket.AMBIGUOUS),
            (0.15, ScoreBucket.HIGH_CONFIDENCE_NOT_FIXED),
            (0.151, ScoreBucket.AMBIGUOUS),
            (0.0, ScoreBucket.HIGH_CONFIDENCE_NOT_FIXED),
            (1.0, ScoreBucket.HIGH_CONFIDENCE_FIXED),
        ],
    )
    def test_boundaries(self, value, bucket):
        assert score_of(value).bucket is bucket

    def test_custom_thresholds(self):
        config = ScoringConfig(fixed_threshold=0.95)
        summary = make_summary(
            interval_cv=0.02,
            concentration=DayConcentration(within=24, total=24, avg_day=1),
            flags=("loan_mortgage",),
        )
        result = RuleScorer(config).score(summary)
        assert result.fixed_threshold == 0.95
        assert result.bucket is ScoreBucket.AMBIGUOUS
