"""Mapping catalog records into candidates and choosing the search category."""

import math
from collections.abc import Iterable, Mapping, Sequence

from vegwise.domain.products import GRADE_ORDER, Baseline, Candidate, Grade

GENERIC_CATEGORY_SLUGS = frozenset(
    {
        "foods",
        "food",
        "meals",
        "prepared-meals",
        "ready-meals",
        "snacks",
        "beverages",
        "drinks",
        "groceries",
        "grocery-products",
        "dishes",
    }
)

PREFERRED_CATEGORY_KEYWORDS = ("instant-ramen", "instant-noodles", "ramen", "noodles")


def parse_number(value: object) -> float | None:
    """Return a finite float from a number or numeric string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_int(value: object) -> int | None:
    """Return an integer from a number or numeric string."""
    number = parse_number(value)
    return int(number) if number is not None else None


def parse_grade(value: object) -> Grade | None:
    """Return an a-e grade; values like 'unknown' count as missing."""
    if not isinstance(value, str):
        return None
    grade = value.strip().lower()
    return grade if grade in GRADE_ORDER else None  # type: ignore[return-value]


def parse_tags(value: object) -> tuple[str, ...]:
    """Return a tuple of tag strings from a raw list."""
    if not isinstance(value, list):
        return ()
    return tuple(str(tag) for tag in value)


def parse_optional_tags(value: object) -> tuple[str, ...] | None:
    """Like parse_tags, but an absent field stays None so `[]` means none."""
    if not isinstance(value, list):
        return None
    return parse_tags(value)


def parse_text(value: object) -> str | None:
    """Return a string value or None."""
    return value if isinstance(value, str) else None


def parse_nutriments(value: object) -> dict[str, object]:
    """Return the nutriments mapping, or an empty one."""
    return dict(value) if isinstance(value, dict) else {}


def map_candidate(hit: Mapping[str, object]) -> Candidate:
    """Map a raw catalog search hit into a Candidate."""
    return Candidate(
        code=str(hit.get("code") or ""),
        product_name=parse_text(hit.get("product_name")),
        brands=parse_text(hit.get("brands")),
        image_url=parse_text(hit.get("image_url")),
        categories_tags=parse_tags(hit.get("categories_tags")),
        countries_tags=parse_tags(hit.get("countries_tags")),
        labels_tags=parse_tags(hit.get("labels_tags")),
        ingredients_analysis_tags=parse_tags(hit.get("ingredients_analysis_tags")),
        allergens_tags=parse_tags(hit.get("allergens_tags")),
        traces_tags=parse_tags(hit.get("traces_tags")),
        nutrition_grade=parse_grade(hit.get("nutrition_grades")),
        nova_group=parse_int(hit.get("nova_group")),
        ecoscore_grade=parse_grade(hit.get("ecoscore_grade")),
        ecoscore_score=parse_number(hit.get("ecoscore_score")),
        nutriments=parse_nutriments(hit.get("nutriments")),
        additives_n=parse_int(hit.get("additives_n")),
        additives_tags=parse_optional_tags(hit.get("additives_tags")),
        palm_oil_ingredients_n=parse_int(hit.get("ingredients_from_palm_oil_n")),
        ingredients_text=parse_text(hit.get("ingredients_text")),
    )


def baseline_from_product(code: str, product: Mapping[str, object]) -> Baseline:
    """Map a product lookup payload into a Baseline."""
    return Baseline(
        code=code,
        name=parse_text(product.get("product_name")),
        categories_tags=parse_tags(product.get("categories_tags")),
        countries_tags=parse_tags(product.get("countries_tags")),
        nutrition_grade=parse_grade(product.get("nutrition_grades")),
        nova_group=parse_int(product.get("nova_group")),
        ecoscore_grade=parse_grade(product.get("ecoscore_grade")),
        ecoscore_score=parse_number(product.get("ecoscore_score")),
        nutriments=parse_nutriments(product.get("nutriments")),
        additives_n=parse_int(product.get("additives_n")),
        additives_tags=parse_optional_tags(product.get("additives_tags")),
        palm_oil_ingredients_n=parse_int(product.get("ingredients_from_palm_oil_n")),
    )


def normalize_category_slugs(tags: Iterable[str]) -> list[str]:
    """Lowercase the leaf segment of each `lang:slug` category tag."""
    slugs = []
    for tag in tags:
        slug = str(tag).split(":")[-1].strip().lower()
        if slug:
            slugs.append(slug)
    return slugs


def pick_category_slug(tags: Iterable[str]) -> str | None:
    """Choose the most specific non-generic category to search on."""
    slugs = [
        slug
        for slug in normalize_category_slugs(tags)
        if slug not in GENERIC_CATEGORY_SLUGS
    ]
    if not slugs:
        return None
    for keyword in PREFERRED_CATEGORY_KEYWORDS:
        hits = [slug for slug in slugs if keyword in slug]
        if hits:
            return max(hits, key=len)
    return max(slugs, key=len)


def english_tag_value(tags: Sequence[str]) -> str | None:
    """Return the first `en:` tag's value, else the last tag's leaf."""
    if not tags:
        return None
    for tag in tags:
        if tag.startswith("en:"):
            return tag[3:]
    return tags[-1].split(":")[-1] or None


def pick_country_slug(
    country_tag: str | None, countries_tags: Sequence[str]
) -> str | None:
    """Prefer the user's country filter over the baseline's own country tags."""
    if country_tag:
        return country_tag.removeprefix("en:")
    return english_tag_value(countries_tags)


def belongs_to_category(candidate: Candidate, slug: str) -> bool:
    """Check a candidate's own categories actually include the searched slug."""
    return any(
        category == slug
        or category.endswith(f"-{slug}")
        or slug.endswith(f"-{category}")
        for category in normalize_category_slugs(candidate.categories_tags)
    )


def select_candidates(
    hits: Iterable[Mapping[str, object]], baseline_code: str, slug: str
) -> list[Candidate]:
    """Map search hits and drop ones without code, the baseline, and strays."""
    selected = []
    for hit in hits:
        candidate = map_candidate(hit)
        if not candidate.code or candidate.code == baseline_code:
            continue
        if not belongs_to_category(candidate, slug):
            continue
        selected.append(candidate)
    return selected
