"""Diet classification of free-text ingredient lists."""

import logging
import re
import time
from collections.abc import Iterable, Mapping, Sequence

from vegwise.domain.analysis import (
    PATTERNS_CATEGORY,
    AnalysisResult,
    DietMode,
    FlagLevel,
    Reason,
    ReasonCategory,
    RuleSet,
    Severity,
    Verdict,
)
from vegwise.services.rules import RuleBook, default_rule_book, resolve_rule_set

_PUNCTUATION = re.compile(r"[()\[\],.!?]")
_WHITESPACE = re.compile(r"\s+")

_CATEGORY_MAP: dict[str, ReasonCategory] = {
    "meat": ReasonCategory.MEAT,
    "animal_products": ReasonCategory.ADDITIVE,
    "dairy": ReasonCategory.DAIRY,
    "egg": ReasonCategory.EGG,
    "honey": ReasonCategory.HONEY,
    "roots": ReasonCategory.ROOT,
    "fungi": ReasonCategory.FUNGI,
    "alcohol": ReasonCategory.ADDITIVE,
    PATTERNS_CATEGORY: ReasonCategory.ADDITIVE,
}

_logger = logging.getLogger(__name__)


def tokenize(raw: str | None) -> list[str]:
    """Split ingredient text into lowercase tokens, keeping order and repeats."""
    if not raw:
        return []
    cleaned = _PUNCTUATION.sub(" ", raw.lower())
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    return [token for token in cleaned.split(" ") if token]


def to_reason(
    ingredient: str,
    category: str,
    severity: Severity,
    explanation: str | None = None,
) -> Reason:
    """Build a Reason, mapping a rule category onto the public category set."""
    return Reason(
        ingredient=ingredient,
        category=_CATEGORY_MAP.get(category, ReasonCategory.ADDITIVE),
        severity=severity,
        explanation=explanation
        or f"{ingredient} is not allowed for this diet (category: {category}).",
    )


def match_reasons(
    tokens: Sequence[str],
    rule_set: RuleSet,
    diet: DietMode | str,
    phrase: str | None = None,
) -> list[Reason]:
    """Match tokens and the rejoined phrase against a resolved rule set."""
    reasons: list[Reason] = []
    seen: set[tuple[str, ReasonCategory, Severity]] = set()

    def add(reason: Reason) -> None:
        key = (reason.ingredient, reason.category, reason.severity)
        if key not in seen:
            seen.add(key)
            reasons.append(reason)

    exact_terms = {
        category: frozenset(term.lower() for term in terms)
        for category, terms in rule_set.blocklist.items()
        if category != PATTERNS_CATEGORY
    }
    patterns = [pattern.lower() for pattern in rule_set.patterns]
    diet_name = diet.value if isinstance(diet, DietMode) else diet
    flags = (
        {term.lower(): level for term, level in rule_set.flags.items()}
        if diet_name == DietMode.JAIN.value
        else {}
    )

    for token in tokens:
        for category, terms in exact_terms.items():
            if token in terms:
                add(to_reason(token, category, Severity.BLOCKING))

        flag = flags.get(token)
        if flag is FlagLevel.UNSURE:
            add(
                to_reason(
                    token,
                    PATTERNS_CATEGORY,
                    Severity.WARNING,
                    f"{token} may be derived from restricted sources for Jain diet.",
                )
            )
        elif flag is FlagLevel.WARNING:
            add(
                to_reason(
                    token,
                    PATTERNS_CATEGORY,
                    Severity.WARNING,
                    f"{token} is cautioned for Jain diet.",
                )
            )

        for pattern in patterns:
            if pattern in token:
                add(
                    to_reason(
                        token,
                        PATTERNS_CATEGORY,
                        Severity.BLOCKING,
                        f"Contains restricted pattern: {pattern}",
                    )
                )
                break

    # Multi-word patterns never fit in a single token.
    full_text = " ".join(tokens) if phrase is None else phrase
    if full_text:
        for pattern in patterns:
            if pattern in full_text:
                add(
                    to_reason(
                        pattern,
                        PATTERNS_CATEGORY,
                        Severity.BLOCKING,
                        f"Contains restricted pattern: {pattern}",
                    )
                )

    return reasons


def compute_verdict(reasons: Iterable[Reason]) -> Verdict:
    """Reduce reasons to a verdict: any blocking is no, any warning is unsure."""
    severities = {reason.severity for reason in reasons}
    if Severity.BLOCKING in severities:
        return Verdict.NO
    if Severity.WARNING in severities:
        return Verdict.UNSURE
    return Verdict.YES


def estimate_confidence(
    raw: str | None,
    reasons: Sequence[Reason] = (),
    verdict: Verdict | None = None,
) -> int:
    """Score how much ingredient text was available to analyze.

    Only the text length is used; reasons and verdict are accepted so callers
    can pass them without the score depending on the classification.
    """
    length = len((raw or "").strip())
    if length > 20:
        return 100
    if length > 0:
        return 75
    return 50


def extract_allergens(
    tokens: Sequence[str], allergens: Mapping[str, tuple[str, ...]]
) -> list[str]:
    """Return allergen names with at least one exact token match, in table order."""
    found: list[str] = []
    token_set = set(tokens)
    for allergen, terms in allergens.items():
        if any(term.lower() in token_set for term in terms) and allergen not in found:
            found.append(allergen)
    return found


def classify(
    ingredients_text: str | None,
    diet: DietMode | str,
    rule_book: RuleBook | None = None,
) -> AnalysisResult:
    """Classify ingredient text against a diet."""
    started = time.perf_counter()
    book = rule_book or default_rule_book()
    tokens = tokenize(ingredients_text)
    rule_set = resolve_rule_set(book, diet)
    reasons = match_reasons(tokens, rule_set, diet, " ".join(tokens))
    verdict = compute_verdict(reasons)
    confidence = estimate_confidence(ingredients_text, reasons, verdict)
    allergens = extract_allergens(tokens, book.allergens)
    _logger.debug(
        "Classified diet=%s tokens=%s categories=%s verdict=%s reasons=%s "
        "allergens=%s elapsed_ms=%.3f",
        diet,
        len(tokens),
        list(rule_set.blocklist),
        verdict.value,
        len(reasons),
        allergens,
        (time.perf_counter() - started) * 1000,
    )
    return AnalysisResult(
        verdict=verdict,
        confidence=confidence,
        reasons=reasons,
        allergens=allergens,
    )
