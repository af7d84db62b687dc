"""Domain models for ingredient analysis."""

from dataclasses import dataclass, field
from enum import Enum


class DietMode(str, Enum):
    """Diet a product is evaluated against."""

    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    JAIN = "jain"


class Verdict(str, Enum):
    """Overall decision for a product and diet."""

    YES = "yes"
    NO = "no"
    UNSURE = "unsure"


class Severity(str, Enum):
    """Impact of a single reason on the verdict."""

    BLOCKING = "blocking"
    WARNING = "warning"


class ReasonCategory(str, Enum):
    """Closed set of categories shown to users."""

    MEAT = "meat"
    DAIRY = "dairy"
    EGG = "egg"
    HONEY = "honey"
    ROOT = "root"
    FUNGI = "fungi"
    ADDITIVE = "additive"


class FlagLevel(str, Enum):
    """Advisory level for terms a diet discourages without blocking."""

    UNSURE = "unsure"
    WARNING = "warning"


@dataclass(frozen=True)
class Reason:
    """Single explanation contributing to a verdict."""

    ingredient: str
    category: ReasonCategory
    severity: Severity
    explanation: str


@dataclass(frozen=True)
class AnalysisResult:
    """Result of classifying ingredient text for a diet."""

    verdict: Verdict
    confidence: int
    reasons: list[Reason]
    allergens: list[str]


@dataclass(frozen=True)
class DietRule:
    """One rule layer as stored in the rule table."""

    extends: str | None = None
    blocklist: dict[str, tuple[str, ...]] = field(default_factory=dict)
    patterns: tuple[str, ...] = ()
    flags: dict[str, FlagLevel] = field(default_factory=dict)


@dataclass(frozen=True)
class RuleSet:
    """Rule layers flattened from root ancestor to the requested diet."""

    blocklist: dict[str, tuple[str, ...]]
    flags: dict[str, FlagLevel]

    @property
    def patterns(self) -> tuple[str, ...]:
        """Free-text patterns merged under the reserved bucket."""
        return self.blocklist.get(PATTERNS_CATEGORY, ())


PATTERNS_CATEGORY = "patterns"
