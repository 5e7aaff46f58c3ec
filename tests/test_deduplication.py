"""Tests for duplicate detection of new statement transactions."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from statement_recon.config import MatchingConfig, ReconConfig
from statement_recon.matching.engine import (
    TransactionDeduplicator,
    TransactionMatcher,
    dates_within_window,
    deduplicate,
    format_transaction,
)
from statement_recon.models import Transaction


def txn(day: str, merchant: str, amount: str, **kwargs) -> Transaction:
    return Transaction(date=day, merchant=merchant, amount=amount, **kwargs)


class TestDeduplicate:
    def test_exact_duplicate(self):
        result = deduplicate(
            [txn("2025-08-15", "STARBUCKS", "5.50")],
            [txn("2025-08-15", "STARBUCKS", "5.50")],
        )
        assert result.unique_transactions == []
        assert result.duplicates_found == 1
        assert result.duplicate_examples == [
            "2025-08-15 | STARBUCKS | $5.50 - same_day match"
        ]

    def test_amount_difference_of_one_cent_is_unique(self):
        result = deduplicate(
            [txn("2025-08-15", "STARBUCKS", "5.51")],
            [txn("2025-08-15", "STARBUCKS", "5.50")],
        )
        assert result.duplicates_found == 0
        assert len(result.unique_transactions) == 1

    def test_amount_within_tolerance_is_duplicate(self):
        result = deduplicate(
            [txn("2025-08-15", "STARBUCKS", "5.509")],
            [txn("2025-08-15", "STARBUCKS", "5.50")],
        )
        assert result.duplicates_found == 1

    def test_float_amounts_compare_exactly(self):
        result = deduplicate(
            [txn("2025-08-15", "STARBUCKS", 0.1 + 0.2)],
            [txn("2025-08-15", "STARBUCKS", 0.3)],
        )
        assert result.duplicates_found == 1

    def test_five_day_window_matches(self):
        result = deduplicate(
            [txn("2025-08-15", "UBER *TRIP NYC", "23.40")],
            [txn("2025-08-10", "UBER PENDING", "23.40")],
        )
        assert result.duplicates_found == 1
        assert result.duplicate_examples[0].endswith("date_window match")

    def test_six_days_apart_is_unique(self):
        result = deduplicate(
            [txn("2025-08-15", "UBER *TRIP NYC", "23.40")],
            [txn("2025-08-09", "UBER PENDING", "23.40")],
        )
        assert result.duplicates_found == 0

    def test_same_day_preferred_over_window(self):
        result = deduplicate(
            [txn("2025-08-15", "STARBUCKS", "5.50")],
            [txn("2025-08-13", "STARBUCKS", "5.50"), txn("2025-08-15", "STARBUCKS", "5.50")],
        )
        assert result.duplicate_examples[0].endswith("same_day match")

    def test_different_merchant_is_unique(self):
        result = deduplicate(
            [txn("2025-08-15", "STARBUCKS", "5.50")],
            [txn("2025-08-15", "PEET'S COFFEE", "5.50")],
        )
        assert result.duplicates_found == 0

    def test_preserves_input_order(self):
        new = [
            txn("2025-08-01", "ALPHA MARKET", "1.00"),
            txn("2025-08-02", "STARBUCKS", "5.50"),
            txn("2025-08-03", "GAMMA HARDWARE", "3.00"),
            txn("2025-08-04", "DELTA FUEL", "4.00"),
        ]
        result = deduplicate(new, [txn("2025-08-02", "STARBUCKS", "5.50")])
        assert result.unique_transactions == [new[0], new[2], new[3]]
        assert result.duplicates_found + len(result.unique_transactions) == len(new)

    def test_examples_are_capped(self):
        start = date(2025, 8, 1)
        batch = [txn(start + timedelta(days=i * 10), "STARBUCKS", "5.50") for i in range(7)]
        result = deduplicate(batch, list(batch))
        assert result.duplicates_found == 7
        assert len(result.duplicate_examples) == 5

    def test_empty_inputs(self):
        assert deduplicate([], []).duplicates_found == 0
        new = [txn("2025-08-15", "STARBUCKS", "5.50")]
        assert deduplicate(new, []).unique_transactions == new

    def test_configured_window(self):
        config = ReconConfig(matching=MatchingConfig(date_window_days=2))
        result = TransactionDeduplicator(config).deduplicate(
            [txn("2025-08-15", "STARBUCKS", "5.50")],
            [txn("2025-08-12", "STARBUCKS", "5.50")],
        )
        assert result.duplicates_found == 0


class TestTransactionMatcher:
    def test_amounts_match_is_strict(self):
        matcher = TransactionMatcher()
        a = txn("2025-08-15", "X", "10.00")
        assert matcher.amounts_match(a, txn("2025-08-15", "X", "10.009"))
        assert not matcher.amounts_match(a, txn("2025-08-15", "X", "10.01"))
        assert not matcher.amounts_match(a, txn("2025-08-15", "X", "9.99"))

    def test_find_match_returns_tier(self):
        matcher = TransactionMatcher()
        existing = txn("2025-08-14", "STARBUCKS", "5.50")
        found = matcher.find_match(txn("2025-08-15", "STARBUCKS", "5.50"), [existing])
        assert found == (existing, "date_window")

    def test_find_match_none(self):
        matcher = TransactionMatcher()
        assert matcher.find_match(txn("2025-08-15", "STARBUCKS", "5.50"), []) is None


class TestHelpers:
    @pytest.mark.parametrize("days, expected", [(0, True), (5, True), (6, False)])
    def test_dates_within_window(self, days, expected):
        d = date(2025, 8, 15)
        assert dates_within_window(d, d - timedelta(days=days), 5) is expected
        assert dates_within_window(d - timedelta(days=days), d, 5) is expected

    def test_timestamps_truncate_to_date(self):
        t = txn("2025-08-15T23:59:00Z", "STARBUCKS", "5.50")
        assert t.date == date(2025, 8, 15)
        assert t.amount == Decimal("5.50")

    def test_format_transaction(self):
        assert format_transaction(txn("2025-08-15", "STARBUCKS", "5.5")) == (
            "2025-08-15 | STARBUCKS | $5.50"
        )
