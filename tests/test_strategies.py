"""Tests for the merchant matching cascade."""

import pytest

from statement_recon.config import MatchingConfig
from statement_recon.matching.strategies import (
    ContainmentStrategy,
    CoreNameStrategy,
    MatchType,
    MerchantMatcher,
    SharedPrefixStrategy,
    merchants_match,
)


class TestMerchantsMatch:
    def test_exact_ignores_case_and_spacing(self):
        result = merchants_match("Starbucks", "  STARBUCKS ")
        assert result.is_match
        assert result.match_type is MatchType.EXACT
        assert result.rule == "exact"

    def test_core_name_match(self):
        result = merchants_match("UBER PENDING", "UBER *TRIP NYC")
        assert result.is_match
        assert result.match_type is MatchType.FUZZY
        assert result.rule == "core_name"

    def test_containment_match(self):
        result = merchants_match("NETFLIX.COM", "NETFLIX.COM LOS GATOS")
        assert result.is_match
        assert result.rule == "containment"

    def test_shared_prefix_match(self):
        result = merchants_match("WHOLEFOODS MARKET", "WHOLEFDS MKT")
        assert result.is_match
        assert result.rule == "shared_prefix"

    def test_brand_prefix_over_matches(self):
        # Distinct services under one brand are accepted as the same payee
        assert merchants_match("UBER", "UBER EATS").is_match

    def test_no_match(self):
        result = merchants_match("Starbucks", "Amazon")
        assert not result.is_match
        assert result.match_type is MatchType.NONE
        assert result.rule is None

    def test_short_core_names_do_not_match(self):
        assert not merchants_match("BP #123", "BP #456").is_match

    def test_short_shared_prefix_rejected(self):
        assert not merchants_match("SUNRISE BAKERY", "SUNSET GRILL").is_match

    def test_prefix_below_ratio_rejected(self):
        assert not merchants_match("CHARLESTON CAFE", "CHARLES SCHWAB").is_match

    @pytest.mark.parametrize(
        "a, b",
        [
            ("UBER PENDING", "UBER *TRIP NYC"),
            ("NETFLIX.COM", "NETFLIX.COM LOS GATOS"),
            ("WHOLEFOODS MARKET", "WHOLEFDS MKT"),
            ("Starbucks", "Amazon"),
            ("CHARLESTON CAFE", "CHARLES SCHWAB"),
        ],
    )
    def test_symmetric(self, a, b):
        assert merchants_match(a, b) == merchants_match(b, a)


class TestStrategies:
    def test_core_name_respects_min_length(self):
        strategy = CoreNameStrategy(min_length=3)
        assert strategy.matches("", "", "ups", "ups")
        assert not strategy.matches("", "", "bp", "bp")

    def test_containment_requires_both_long_enough(self):
        strategy = ContainmentStrategy(min_length=4)
        assert strategy.matches("", "", "shell", "shell oil")
        assert not strategy.matches("", "", "ups", "ups store")

    def test_shared_prefix_ratio(self):
        strategy = SharedPrefixStrategy(min_length=5, ratio=0.7)
        # run of 6 against a shorter name of 8 -> needs 5
        assert strategy.matches("", "", "wholefoods market", "wholefds")
        # run of 7 against a shorter name of 14 -> needs 9
        assert not strategy.matches("", "", "charleston cafe", "charles schwab")


class TestMerchantMatcherConfig:
    def test_stricter_prefix_length(self):
        matcher = MerchantMatcher(MatchingConfig(min_prefix_length=7))
        assert not matcher.match("WHOLEFOODS MARKET", "WHOLEFDS MKT").is_match

    def test_disabling_containment_by_length(self):
        matcher = MerchantMatcher(
            MatchingConfig(min_containment_length=50, min_prefix_length=50)
        )
        assert not matcher.match("NETFLIX.COM", "NETFLIX.COM LOS GATOS").is_match
