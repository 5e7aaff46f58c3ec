"""Shared fixtures: a small expense history with known recurring merchants."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from statement_recon.models import Transaction


def _monthly(merchant: str, amount: str, days: list[tuple[int, int]], year: int = 2025):
    return [
        Transaction(date=date(year, month, day), merchant=merchant, amount=Decimal(amount))
        for month, day in days
    ]


@pytest.fixture
def mortgage_history() -> list[Transaction]:
    """Six identical mortgage payments on the 5th."""
    return _monthly(
        "WELLS MORTGAGE SERVICING",
        "-1200.00",
        [(1, 5), (2, 5), (3, 5), (4, 5), (5, 5), (6, 5)],
    )


@pytest.fixture
def gym_history() -> list[Transaction]:
    """Roughly monthly gym charges with one price bump."""
    amounts = ["-50.00", "-50.00", "-65.00", "-50.00", "-50.00"]
    days = [(1, 10), (2, 12), (3, 9), (4, 15), (5, 11)]
    return [
        Transaction(date=date(2025, m, d), merchant="IRONWORKS FITNESS", amount=Decimal(a))
        for (m, d), a in zip(days, amounts)
    ]


@pytest.fixture
def coffee_history() -> list[Transaction]:
    """Twenty weekly coffee purchases with varying amounts."""
    amounts = ["-4.50", "-6.25", "-12.00", "-5.10"]
    start = date(2025, 1, 3)
    return [
        Transaction(
            date=start + timedelta(days=7 * i),
            merchant="BLUE BOTTLE COFFEE",
            amount=Decimal(amounts[i % 4]),
        )
        for i in range(20)
    ]


@pytest.fixture
def netflix_history() -> list[Transaction]:
    """Two recent streaming charges, too little history to score."""
    return [
        Transaction(date=date(2025, 5, 20), merchant="NETFLIX.COM", amount=Decimal("-15.49")),
        Transaction(date=date(2025, 6, 1), merchant="NETFLIX.COM", amount=Decimal("-15.49")),
    ]


@pytest.fixture
def expense_history(mortgage_history, gym_history, coffee_history, netflix_history):
    return mortgage_history + gym_history + coffee_history + netflix_history
