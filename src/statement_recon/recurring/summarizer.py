"""
Merchant summarization for recurring-expense detection.
Groups an expense history by merchant and computes a statistical
fingerprint for each group with enough history.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence
import logging
import re
import statistics

from ..config import SummaryConfig
from ..matching.normalizer import extract_core_merchant_name
from ..models.merchant import (
    DayConcentration,
    MerchantStats,
    MerchantSummary,
    SampleTransaction,
)
from ..models.transaction import Transaction

logger = logging.getLogger(__name__)

# (flag, pattern) pairs; every flag whose pattern fires is reported
FLAG_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("contains_bill_keyword", re.compile(r"\b(bill|payment|pay|autopay|auto-pay)\b")),
    ("utility", re.compile(r"\b(electric|gas|water|utility|utilities|power|energy)\b")),
    ("loan_mortgage", re.compile(r"\b(loan|mortgage|servicing|lending)\b")),
    ("insurance", re.compile(r"\b(insurance|ins|policy)\b")),
    ("subscription", re.compile(r"\b(subscription|monthly|annual|membership)\b")),
    ("ach_autopay", re.compile(r"\b(ach|direct debit|recurring|automatic)\b")),
    ("has_account_number", re.compile(r"\b(acct|account|a/c)\b")),
]


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a spreadsheet: halves go away from zero."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """
    Population standard deviation divided by the mean.

    Returns 0 for fewer than two values and 1 (maximal instability) when
    the mean is zero.
    """
    if len(values) < 2:
        return 0.0
    mean = statistics.fmean(values)
    if mean == 0:
        return 1.0
    return statistics.pstdev(values) / mean


def day_concentration(days_of_month: Sequence[int], window: int = 3) -> DayConcentration:
    """Count days within ``window`` of the rounded mean day of month."""
    if not days_of_month:
        return DayConcentration(within=0, total=0, avg_day=0, window=window)
    avg_day = int(round_half_up(statistics.fmean(days_of_month)))
    within = sum(1 for d in days_of_month if abs(d - avg_day) <= window)
    return DayConcentration(
        within=within, total=len(days_of_month), avg_day=avg_day, window=window
    )


def extract_flags(merchant_name: str, descriptions: Sequence[str]) -> tuple[str, ...]:
    """Keyword flags found in a merchant name and its descriptions."""
    text = " ".join([merchant_name.lower()] + [d.lower() for d in descriptions])
    return tuple(flag for flag, pattern in FLAG_PATTERNS if pattern.search(text))


def pick_samples(items: Sequence[SampleTransaction]) -> tuple[SampleTransaction, ...]:
    """First, middle and last items; everything when there are three or fewer."""
    if len(items) <= 3:
        return tuple(items)
    return (items[0], items[len(items) // 2], items[-1])


class MerchantSummarizer:
    """Builds merchant summaries from a transaction history."""

    def __init__(self, config: Optional[SummaryConfig] = None):
        """
        Initialize the summarizer.

        Args:
            config: Summary eligibility and grouping configuration
        """
        self.config = config or SummaryConfig()
        self._rent = re.compile(self.config.rent_pattern, re.IGNORECASE)
        self._rent_exclusion = re.compile(self.config.rent_exclusion_pattern, re.IGNORECASE)

    def merchant_key(self, merchant: str) -> str:
        """
        Grouping key for a merchant.

        Generic rent wording collapses to one key so differently labeled
        rent line items land in the same group.
        """
        key = extract_core_merchant_name(merchant)
        if self._rent.search(key) and not self._rent_exclusion.search(key):
            return self.config.rent_key
        return key

    def summarize(self, transactions: Sequence[Transaction]) -> list[MerchantSummary]:
        """
        Create summaries for every eligible merchant group.

        Args:
            transactions: Expense history

        Returns:
            Summaries in first-seen merchant order
        """
        groups: dict[str, list[Transaction]] = {}
        for txn in transactions:
            groups.setdefault(self.merchant_key(txn.merchant), []).append(txn)

        summaries: list[MerchantSummary] = []
        for key, txns in groups.items():
            summary = self._summarize_group(key, txns)
            if summary is not None:
                summaries.append(summary)

        logger.info(
            f"Summarized {len(transactions)} transactions into {len(groups)} merchant "
            f"groups, {len(summaries)} eligible"
        )
        return summaries

    def _summarize_group(
        self, key: str, txns: list[Transaction]
    ) -> Optional[MerchantSummary]:
        if len(txns) < self.config.min_transactions:
            logger.debug(f"Skipping {key!r}: {len(txns)} transactions")
            return None

        ordered = sorted(txns, key=lambda t: t.date)
        months = {(t.date.year, t.date.month) for t in ordered}
        if len(months) < self.config.min_months:
            logger.debug(f"Skipping {key!r}: {len(months)} distinct months")
            return None

        intervals = [
            (later.date - earlier.date).days for earlier, later in zip(ordered, ordered[1:])
        ]
        amounts = [abs(float(t.amount)) for t in ordered]
        descriptions = [t.description or t.merchant for t in ordered]

        stats = MerchantStats(
            count=len(ordered),
            median_interval_days=int(round_half_up(statistics.median(intervals)))
            if intervals
            else 0,
            interval_cv=round_half_up(coefficient_of_variation(intervals), 2),
            day_concentration=day_concentration(
                [t.date.day for t in ordered], self.config.day_window
            ),
            amount_mean=round_half_up(statistics.fmean(amounts), 2),
            amount_rstd=round_half_up(coefficient_of_variation(amounts), 2),
            flags=extract_flags(ordered[0].merchant, descriptions),
        )

        samples = pick_samples(
            [
                SampleTransaction(
                    date=t.date,
                    amount=abs(float(t.amount)),
                    description=t.description or t.merchant,
                )
                for t in ordered
            ]
        )

        return MerchantSummary(
            merchant_key=key,
            original_name=ordered[-1].merchant,
            sample_transactions=samples,
            stats=stats,
            first_date=ordered[0].date,
            last_date=ordered[-1].date,
            unique_months=len(months),
        )


def create_merchant_summaries(transactions: Sequence[Transaction]) -> list[MerchantSummary]:
    """Summarize with default eligibility rules."""
    return MerchantSummarizer().summarize(transactions)


def _escape_for_prompt(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", " ")
        .replace("\r", "")
        .replace("\t", " ")
    )


def format_merchant_summary_for_llm(summary: MerchantSummary) -> str:
    """Compact text block describing a summary for an external classifier."""
    lines = [
        f'PAYEE: "{_escape_for_prompt(summary.original_name)}" '
        f"(group key: {_escape_for_prompt(summary.merchant_key)})",
        f"SAMPLES ({len(summary.sample_transactions)}):",
    ]
    for sample in summary.sample_transactions:
        description = _escape_for_prompt(sample.description[:50])
        lines.append(
            f'  - {sample.date.isoformat()} debit ${sample.amount:.2f} "{description}"'
        )

    stats = summary.stats
    lines.extend(
        [
            "STATS:",
            f"  - count: {stats.count} in {summary.unique_months} months",
            f"  - median_interval: {stats.median_interval_days} days, "
            f"interval_cv: {stats.interval_cv:g}",
            f"  - day concentration: {stats.day_concentration}",
            f"  - amount_mean: ${stats.amount_mean:.2f}, amount_rstd: {stats.amount_rstd:g}",
        ]
    )
    if stats.flags:
        flags = ", ".join(f'"{flag}"' for flag in stats.flags)
        lines.append(f"  - flags: [{flags}]")

    return "\n".join(lines)
