"""Alternative product suggestions for a scanned baseline."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace

from vegwise.domain.products import Baseline, Candidate, Suggestion, SuggestionPrefs
from vegwise.services.candidates import (
    pick_category_slug,
    pick_country_slug,
    select_candidates,
)
from vegwise.services.filters import evaluate_candidate
from vegwise.services.ranking import rank_candidates
from vegwise.services.rules import RuleBook

BaselineLookup = Callable[[str], Awaitable[Baseline | None]]
CatalogSearch = Callable[[str, str | None], Awaitable[list[dict[str, object]]]]

_logger = logging.getLogger(__name__)


@dataclass
class AlternativesService:
    """Finds, filters and ranks same-category alternatives to a product."""

    fetch_product_by_code: BaselineLookup
    search_catalog: CatalogSearch
    rule_book: RuleBook | None = None

    async def rank_alternatives(
        self, baseline: Baseline, prefs: SuggestionPrefs
    ) -> list[Suggestion]:
        """Return ranked suggestions; collaborator failures yield an empty list."""
        resolved = await self.backfill_baseline(baseline)
        slug = pick_category_slug(resolved.categories_tags)
        if slug is None:
            _logger.info("No usable category for baseline %s", resolved.code)
            return []
        country = pick_country_slug(prefs.country_tag, resolved.countries_tags)

        try:
            hits = await self.search_catalog(slug, country)
        except Exception as exc:
            _logger.warning(
                "Catalog search failed: category=%s country=%s error=%s",
                slug,
                country,
                exc,
            )
            return []

        candidates = select_candidates(hits, resolved.code, slug)
        accepted = self.filter_candidates(candidates, prefs)
        suggestions = rank_candidates(accepted, resolved, prefs)
        _logger.info(
            "Suggestions for %s: category=%s hits=%s candidates=%s "
            "accepted=%s returned=%s",
            resolved.code,
            slug,
            len(hits),
            len(candidates),
            len(accepted),
            len(suggestions),
        )
        return suggestions

    def filter_candidates(
        self, candidates: list[Candidate], prefs: SuggestionPrefs
    ) -> list[Candidate]:
        """Keep candidates that pass every preference check."""
        return [
            candidate
            for candidate in candidates
            if evaluate_candidate(candidate, prefs, self.rule_book).passed
        ]

    async def backfill_baseline(self, baseline: Baseline) -> Baseline:
        """Fill missing category and quality data from a lookup by code."""
        if baseline.categories_tags:
            return baseline
        try:
            fetched = await self.fetch_product_by_code(baseline.code)
        except Exception as exc:
            _logger.warning("Baseline lookup failed for %s: %s", baseline.code, exc)
            return baseline
        if fetched is None:
            return baseline
        return merge_baseline(baseline, fetched)


_MERGED_FIELDS = (
    "name",
    "categories_tags",
    "countries_tags",
    "nutrition_grade",
    "nova_group",
    "ecoscore_grade",
    "ecoscore_score",
    "nutriments",
    "additives_n",
    "additives_tags",
    "palm_oil_ingredients_n",
)

# Empty here means "not reported"; an empty additives_tags means no additives.
_EMPTY_IS_MISSING = frozenset({"categories_tags", "countries_tags", "nutriments"})


def merge_baseline(baseline: Baseline, fetched: Baseline) -> Baseline:
    """Prefer the caller's values and take missing ones from the fetched record."""
    updates = {}
    for name in _MERGED_FIELDS:
        value = getattr(baseline, name)
        missing = not value if name in _EMPTY_IS_MISSING else value is None
        if missing:
            updates[name] = getattr(fetched, name)
    return replace(baseline, **updates)
