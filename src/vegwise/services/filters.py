"""User preference filtering of candidate products."""

from collections.abc import Iterable
from dataclasses import dataclass

from vegwise.domain.analysis import DietMode, Verdict
from vegwise.domain.products import Candidate, DesiredLabel, SuggestionPrefs
from vegwise.services.analysis import classify
from vegwise.services.rules import RuleBook

_ANALYSIS_TAG_FALLBACK = {
    DietMode.VEGAN: "vegan:yes",
    DietMode.VEGETARIAN: "vegetarian:yes",
}


@dataclass(frozen=True)
class FilterOutcome:
    """Whether a candidate passed, with the diet verdict computed for it."""

    passed: bool
    diet_verdict: Verdict


def candidate_diet_verdict(
    candidate: Candidate, diet: DietMode, rule_book: RuleBook | None = None
) -> Verdict:
    """Classify the candidate's ingredients, or fall back to catalog analysis tags."""
    if candidate.ingredients_text:
        return classify(candidate.ingredients_text, diet, rule_book).verdict
    expected = _ANALYSIS_TAG_FALLBACK.get(diet)
    if expected and any(expected in tag for tag in candidate.ingredients_analysis_tags):
        return Verdict.YES
    return Verdict.UNSURE


def normalize_allergen_tags(tags: Iterable[str]) -> list[str]:
    """Lowercase allergen tags and strip the `en:` prefix."""
    return [str(tag).lower().removeprefix("en:") for tag in tags]


def is_palm_oil_free(palm_oil_ingredients_n: int | None) -> bool:
    """A missing palm oil count is treated as zero."""
    return (palm_oil_ingredients_n or 0) == 0


def matched_labels(
    labels_tags: Iterable[str], required: Iterable[DesiredLabel]
) -> tuple[DesiredLabel, ...]:
    """Required labels found as a substring of any of the candidate's label tags."""
    lowered = [str(tag).lower() for tag in labels_tags]
    return tuple(
        label for label in required if any(label.value in tag for tag in lowered)
    )


def evaluate_candidate(
    candidate: Candidate, prefs: SuggestionPrefs, rule_book: RuleBook | None = None
) -> FilterOutcome:
    """Apply diet, allergen, palm oil and label checks; stop at the first failure."""
    diet_verdict = candidate_diet_verdict(candidate, prefs.diet, rule_book)
    if diet_verdict is not Verdict.YES:
        return FilterOutcome(passed=False, diet_verdict=diet_verdict)

    avoid = set(normalize_allergen_tags(prefs.avoid_allergens))
    if any(tag in avoid for tag in normalize_allergen_tags(candidate.allergens_tags)):
        return FilterOutcome(passed=False, diet_verdict=diet_verdict)

    if prefs.palm_oil_free and not is_palm_oil_free(candidate.palm_oil_ingredients_n):
        return FilterOutcome(passed=False, diet_verdict=diet_verdict)

    required = tuple(prefs.required_labels)
    if len(matched_labels(candidate.labels_tags, required)) != len(required):
        return FilterOutcome(passed=False, diet_verdict=diet_verdict)

    return FilterOutcome(passed=True, diet_verdict=diet_verdict)
