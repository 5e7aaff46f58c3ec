"""
Merchant name normalization.
Reduces noisy billing descriptors to a comparable core name.
"""

import re

_LIFECYCLE_TOKENS = re.compile(
    r"\b(pending|posted|processing|hold|authorization|auth)\b"
)
_STORE_NUMBER = re.compile(r"#\s*\d+")
_STORE_LABEL = re.compile(r"\bstore\s*\d+\b")
_BILLING_REFERENCE = re.compile(r"\*\s*[a-z0-9]+")
_TRAILING_CODE = re.compile(r"\s+[a-z]{2,3}$")
_SEPARATORS = re.compile(r"[*\-_]")
_WHITESPACE = re.compile(r"\s+")


def _normalize_once(name: str) -> str:
    name = name.lower().strip()
    name = _LIFECYCLE_TOKENS.sub(" ", name)
    name = _STORE_NUMBER.sub(" ", name)
    name = _STORE_LABEL.sub(" ", name)
    name = _BILLING_REFERENCE.sub(" ", name)
    # Trailing state/city code, only when something precedes it
    name = _TRAILING_CODE.sub("", name.strip())
    name = _SEPARATORS.sub(" ", name)
    return _WHITESPACE.sub(" ", name).strip()


def extract_core_merchant_name(raw: str) -> str:
    """
    Canonicalize a raw merchant string into its core name.

    "UBER *TRIP NYC" and "UBER PENDING" both become "uber";
    "STARBUCKS #1234 SEATTLE WA" becomes "starbucks seattle".

    The pipeline is repeated until the result stops changing, so the
    function is idempotent. Non-string or empty input yields "".

    Args:
        raw: Merchant string as it appears on the statement

    Returns:
        Lowercase core merchant name
    """
    if not isinstance(raw, str):
        return ""

    current = raw
    while True:
        normalized = _normalize_once(current)
        if normalized == current:
            return normalized
        current = normalized


def collapse_merchant(raw: str) -> str:
    """Lowercase and collapse whitespace without stripping any tokens."""
    if not isinstance(raw, str):
        return ""
    return " ".join(raw.lower().split())
