"""
Merchant matching strategies.
Each strategy implements one rule of the exact-to-fuzzy matching cascade.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import MatchingConfig
from .normalizer import collapse_merchant, extract_core_merchant_name


class MatchType(Enum):
    """How two merchant strings were judged to be the same payee."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass(frozen=True)
class MerchantMatch:
    """Result of comparing two merchant strings."""

    is_match: bool
    match_type: MatchType
    rule: Optional[str] = None


NO_MATCH = MerchantMatch(is_match=False, match_type=MatchType.NONE)


class MerchantMatchStrategy(ABC):
    """Abstract base class for merchant matching rules."""

    name: str = "base"
    match_type: MatchType = MatchType.FUZZY

    @abstractmethod
    def matches(self, raw_a: str, raw_b: str, core_a: str, core_b: str) -> bool:
        """
        Decide whether two merchants match under this rule.

        Args:
            raw_a: First raw merchant string
            raw_b: Second raw merchant string
            core_a: Core name of the first merchant
            core_b: Core name of the second merchant

        Returns:
            True if the rule fires
        """
        pass


class ExactMerchantStrategy(MerchantMatchStrategy):
    """Case-insensitive, whitespace-collapsed equality of the raw strings."""

    name = "exact"
    match_type = MatchType.EXACT

    def matches(self, raw_a: str, raw_b: str, core_a: str, core_b: str) -> bool:
        return collapse_merchant(raw_a) == collapse_merchant(raw_b)


class CoreNameStrategy(MerchantMatchStrategy):
    """Equal core names of a meaningful length."""

    name = "core_name"

    def __init__(self, min_length: int = 3):
        self.min_length = min_length

    def matches(self, raw_a: str, raw_b: str, core_a: str, core_b: str) -> bool:
        return core_a == core_b and len(core_a) >= self.min_length


class ContainmentStrategy(MerchantMatchStrategy):
    """One core name contains the other."""

    name = "containment"

    def __init__(self, min_length: int = 4):
        self.min_length = min_length

    def matches(self, raw_a: str, raw_b: str, core_a: str, core_b: str) -> bool:
        if len(core_a) < self.min_length or len(core_b) < self.min_length:
            return False
        return core_a in core_b or core_b in core_a


class SharedPrefixStrategy(MerchantMatchStrategy):
    """
    Long common prefix between the core names.

    Distinct merchants sharing a brand prefix ("uber" / "uber eats") can
    match here; the cascade accepts that false-positive bias.
    """

    name = "shared_prefix"

    def __init__(self, min_length: int = 5, ratio: float = 0.7):
        self.min_length = min_length
        self.ratio = ratio

    def matches(self, raw_a: str, raw_b: str, core_a: str, core_b: str) -> bool:
        if len(core_a) < self.min_length or len(core_b) < self.min_length:
            return False

        run = 0
        for char_a, char_b in zip(core_a, core_b):
            if char_a != char_b:
                break
            run += 1

        shorter = min(len(core_a), len(core_b))
        return run >= self.min_length and run >= int(shorter * self.ratio)


class MerchantMatcher:
    """
    Ordered cascade of merchant rules: exact, core equality, containment,
    shared prefix. The first rule that fires decides the match type.
    """

    def __init__(self, config: Optional[MatchingConfig] = None):
        """
        Initialize the cascade.

        Args:
            config: Matching thresholds (defaults when omitted)
        """
        config = config or MatchingConfig()
        self.strategies: list[MerchantMatchStrategy] = [
            ExactMerchantStrategy(),
            CoreNameStrategy(min_length=config.min_core_length),
            ContainmentStrategy(min_length=config.min_containment_length),
            SharedPrefixStrategy(
                min_length=config.min_prefix_length, ratio=config.prefix_ratio
            ),
        ]

    def match(self, merchant_a: str, merchant_b: str) -> MerchantMatch:
        """Compare two raw merchant strings."""
        core_a = extract_core_merchant_name(merchant_a)
        core_b = extract_core_merchant_name(merchant_b)

        for strategy in self.strategies:
            if strategy.matches(merchant_a, merchant_b, core_a, core_b):
                return MerchantMatch(
                    is_match=True, match_type=strategy.match_type, rule=strategy.name
                )

        return NO_MATCH


_DEFAULT_MATCHER = MerchantMatcher()


def merchants_match(merchant_a: str, merchant_b: str) -> MerchantMatch:
    """Compare two merchants with the default thresholds."""
    return _DEFAULT_MATCHER.match(merchant_a, merchant_b)
