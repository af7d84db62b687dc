"""Scoring, ordering and diversification of alternative products."""

import math
from collections.abc import Callable, Iterable
from typing import TypeVar

from vegwise.domain.analysis import Verdict
from vegwise.domain.products import (
    GRADE_ORDER,
    Baseline,
    Candidate,
    Grade,
    MetricDelta,
    SortMode,
    Suggestion,
    SuggestionBadges,
    SuggestionDeltas,
    SuggestionPrefs,
)
from vegwise.services.candidates import parse_number
from vegwise.services.filters import is_palm_oil_free, matched_labels

MAX_PER_BRAND = 2

_T = TypeVar("_T")


def grade_rank(grade: Grade | None) -> int | None:
    """Return 0 for grade a through 4 for grade e."""
    if grade is None:
        return None
    return GRADE_ORDER.index(grade)


def grade_steps(candidate: Grade | None, baseline: Grade | None) -> int:
    """Number of grade steps the candidate improves on the baseline."""
    candidate_rank = grade_rank(candidate)
    baseline_rank = grade_rank(baseline)
    if candidate_rank is None or baseline_rank is None:
        return 0
    return max(0, baseline_rank - candidate_rank)


def sugars_100g(product: Baseline | Candidate) -> float | None:
    """Sugars per 100g, if reported."""
    return parse_number(product.nutriments.get("sugars_100g"))


def salt_100g(product: Baseline | Candidate) -> float | None:
    """Salt per 100g, if reported."""
    return parse_number(product.nutriments.get("salt_100g"))


def additive_count(product: Baseline | Candidate) -> int | None:
    """Additive count, falling back to the number of additive tags."""
    if product.additives_n is not None:
        return product.additives_n
    if product.additives_tags is not None:
        return len(product.additives_tags)
    return None


def score_candidate(
    candidate: Candidate, baseline: Baseline, prefs: SuggestionPrefs
) -> float:
    """Weighted improvement of a candidate over the baseline."""
    score = 0.0
    nutri_steps = grade_steps(candidate.nutrition_grade, baseline.nutrition_grade)
    if nutri_steps:
        score += 20 + 10 * nutri_steps
    if (
        candidate.nova_group is not None
        and baseline.nova_group is not None
        and candidate.nova_group < baseline.nova_group
    ):
        score += 12 + 6 * (baseline.nova_group - candidate.nova_group)
    eco_steps = grade_steps(candidate.ecoscore_grade, baseline.ecoscore_grade)
    if eco_steps:
        score += 15 + 7 * eco_steps
    if is_palm_oil_free(candidate.palm_oil_ingredients_n) and not is_palm_oil_free(
        baseline.palm_oil_ingredients_n
    ):
        score += 10
    score += 8 * len(matched_labels(candidate.labels_tags, prefs.required_labels))

    sugar = sugars_100g(candidate)
    sugar_base = sugars_100g(baseline)
    if sugar is not None and sugar_base is not None and sugar < sugar_base:
        score += min(10.0, (sugar_base - sugar) / max(1.0, sugar_base) * 10)

    additives = additive_count(candidate)
    additives_base = additive_count(baseline)
    if (
        additives is not None
        and additives_base is not None
        and additives > additives_base
    ):
        score -= 8 * (additives - additives_base)
    return score


def sort_key(candidate: Candidate, mode: SortMode) -> float:
    """Single metric for non-balanced modes; missing values sort last."""
    if mode is SortMode.NUTRI:
        value: float | None = grade_rank(candidate.nutrition_grade)
    elif mode is SortMode.NOVA:
        value = candidate.nova_group
    elif mode is SortMode.ECO:
        value = grade_rank(candidate.ecoscore_grade)
    elif mode is SortMode.SUGAR:
        value = sugars_100g(candidate)
    elif mode is SortMode.SALT:
        value = salt_100g(candidate)
    else:
        raise ValueError(f"No single-metric sort key for mode {mode.value}")
    return math.inf if value is None else float(value)


def order_scored(
    scored: list[tuple[Candidate, float]], mode: SortMode
) -> list[tuple[Candidate, float]]:
    """Sort by score (balanced) or by the mode's metric, ties broken by score."""
    if mode is SortMode.BALANCED:
        return sorted(scored, key=lambda item: -item[1])
    return sorted(scored, key=lambda item: (sort_key(item[0], mode), -item[1]))


def primary_brand(brands: str | None) -> str:
    """First comma-separated brand, lowercased."""
    return (brands or "").split(",")[0].strip().lower()


def diversify_by_brand(
    items: Iterable[_T],
    brand_of: Callable[[_T], str | None],
    max_per_brand: int = MAX_PER_BRAND,
) -> list[_T]:
    """Keep at most `max_per_brand` items per primary brand, preserving order."""
    counts: dict[str, int] = {}
    kept = []
    for item in items:
        brand = primary_brand(brand_of(item))
        seen = counts.get(brand, 0)
        if seen < max_per_brand:
            kept.append(item)
            counts[brand] = seen + 1
    return kept


def _delta(
    baseline_value: object | None, candidate_value: object | None
) -> MetricDelta | None:
    if baseline_value is None and candidate_value is None:
        return None
    return MetricDelta(from_value=baseline_value, to_value=candidate_value)


def compute_deltas(candidate: Candidate, baseline: Baseline) -> SuggestionDeltas:
    """Baseline-to-candidate pairs for metrics where either side has a value."""
    return SuggestionDeltas(
        nutri=_delta(baseline.nutrition_grade, candidate.nutrition_grade),
        nova=_delta(baseline.nova_group, candidate.nova_group),
        eco=_delta(baseline.ecoscore_grade, candidate.ecoscore_grade),
        sugars_100g=_delta(sugars_100g(baseline), sugars_100g(candidate)),
        salt_100g=_delta(salt_100g(baseline), salt_100g(candidate)),
        additives=_delta(additive_count(baseline), additive_count(candidate)),
    )


def build_suggestion(
    candidate: Candidate, baseline: Baseline, prefs: SuggestionPrefs, score: float
) -> Suggestion:
    """Attach verdict, badges and deltas to a ranked candidate."""
    return Suggestion(
        candidate=candidate,
        diet_verdict=Verdict.YES,
        badges=SuggestionBadges(
            palm_oil_free=is_palm_oil_free(candidate.palm_oil_ingredients_n),
            labels=matched_labels(candidate.labels_tags, prefs.required_labels),
        ),
        deltas=compute_deltas(candidate, baseline),
        score=score,
    )


def rank_candidates(
    candidates: Iterable[Candidate], baseline: Baseline, prefs: SuggestionPrefs
) -> list[Suggestion]:
    """Score, order, diversify and truncate filtered candidates."""
    scored = [
        (candidate, score_candidate(candidate, baseline, prefs))
        for candidate in candidates
    ]
    ordered = order_scored(scored, prefs.sort)
    diversified = diversify_by_brand(ordered, lambda item: item[0].brands)
    return [
        build_suggestion(candidate, baseline, prefs, score)
        for candidate, score in diversified[: max(prefs.limit, 0)]
    ]
