"""
Curated subscription-service patterns for merchants with short history.
Matching runs against lowercased merchant + description text.
"""

from datetime import date, timedelta
from typing import Optional, Sequence
import logging
import re
import statistics

from ..models.merchant import FixedExpense
from ..models.transaction import Transaction

logger = logging.getLogger(__name__)

SUBSCRIPTION_PATTERNS: list[tuple[str, list[re.Pattern]]] = [
    ("YouTube", [re.compile(r"youtube(\s*premium|\s*music)?"), re.compile(r"google\s*youtube")]),
    ("Netflix", [re.compile(r"netflix")]),
    ("Spotify", [re.compile(r"spotify")]),
    (
        "Apple Services",
        [
            re.compile(r"apple\.com/bill"),
            re.compile(r"\bapple\s*(one|music|tv|icloud)\b"),
            re.compile(r"\bitunes\b"),
            re.compile(r"\bapp\s*store\b"),
        ],
    ),
    (
        "Google Services",
        [
            re.compile(r"\bgoogle\s*one\b"),
            re.compile(r"\bgoogle\s*play\b"),
            re.compile(r"google\s*storage"),
            re.compile(r"g\.co/helppay"),
        ],
    ),
    ("Amazon Prime", [re.compile(r"amazon\s*prime"), re.compile(r"\bprime\s*video\b")]),
    ("Disney+", [re.compile(r"disney\+|disney\s*plus")]),
    ("Hulu", [re.compile(r"\bhulu\b")]),
    ("Max (HBO)", [re.compile(r"\bhbo\b"), re.compile(r"\bmax\b")]),
    ("Paramount+", [re.compile(r"paramount\+|paramount\s*plus")]),
    ("Peacock", [re.compile(r"peacock")]),
    (
        "Microsoft",
        [
            re.compile(r"microsoft\s*365"),
            re.compile(r"\boffice\s*365\b"),
            re.compile(r"xbox\s*game\s*pass"),
            re.compile(r"\bxbox\b"),
        ],
    ),
    ("Adobe", [re.compile(r"adobe"), re.compile(r"creative\s*cloud")]),
    ("Dropbox", [re.compile(r"dropbox")]),
    ("iCloud", [re.compile(r"\bicloud\b")]),
    ("Zoom", [re.compile(r"\bzoom\b")]),
    ("GitHub", [re.compile(r"\bgithub\b")]),
    ("Patreon", [re.compile(r"\bpatreon\b")]),
    ("NYTimes", [re.compile(r"new\s*york\s*times|nytimes")]),
    ("PrimeVideoChannels", [re.compile(r"channel\s*subscription")]),
    # Generic billing descriptors ("APPLE.COM/BILL", "GOOGLE*SERVICE", ...)
    (
        "GenericSubscriptionDescriptors",
        [
            re.compile(r"\bsubscription\b"),
            re.compile(r"\bmonthly\b"),
            re.compile(r"\bannual\b"),
            re.compile(r"\brecurring\b"),
            re.compile(r"\bmembership\b"),
        ],
    ),
]


def match_subscription_pattern(text: str) -> Optional[str]:
    """Name of the first subscription service whose pattern matches ``text``."""
    lowered = text.lower()
    for name, patterns in SUBSCRIPTION_PATTERNS:
        if any(p.search(lowered) for p in patterns):
            return name
    return None


def build_subscription_candidates(
    transactions: Sequence[Transaction],
    as_of: date,
    lookback_days: int = 45,
    exclude_merchants: Optional[set[str]] = None,
) -> list[FixedExpense]:
    """
    Recent subscription-looking merchants that lack enough history to score.

    Args:
        transactions: Expense history
        as_of: Reference date for the lookback window
        lookback_days: Only transactions on or after ``as_of - lookback_days``
        exclude_merchants: Raw merchant names already reported elsewhere

    Returns:
        Candidates sorted by amount, largest first
    """
    cutoff = as_of - timedelta(days=lookback_days)
    excluded = exclude_merchants or set()

    groups: dict[str, list[Transaction]] = {}
    for txn in transactions:
        if txn.date < cutoff or txn.date > as_of:
            continue
        key = (txn.merchant or "").strip()
        if not key or key in excluded:
            continue
        if match_subscription_pattern(f"{txn.merchant} {txn.description or ''}") is None:
            continue
        groups.setdefault(key, []).append(txn)

    candidates: list[FixedExpense] = []
    for merchant, items in groups.items():
        amounts = sorted(abs(float(t.amount)) for t in items)
        latest = max(items, key=lambda t: t.date)
        candidates.append(
            FixedExpense(
                merchant_name=merchant,
                merchant_key=merchant.lower(),
                monthly_amount=round(statistics.median_high(amounts), 2),
                occurrence_count=len(items),
                months_tracked=1,
                avg_day_of_month=latest.date.day,
                last_occurrence_date=latest.date,
                source="rule_fallback",
                score=0.5,
                is_maybe=True,
                is_subscription=True,
            )
        )

    candidates.sort(key=lambda c: c.monthly_amount, reverse=True)
    logger.info(f"Found {len(candidates)} subscription candidates since {cutoff.isoformat()}")
    return candidates
