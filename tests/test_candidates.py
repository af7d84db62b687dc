"""Tests for catalog hit mapping and category selection."""

import pytest

from vegwise.domain.products import Candidate
from vegwise.services.candidates import (
    baseline_from_product,
    belongs_to_category,
    english_tag_value,
    map_candidate,
    normalize_category_slugs,
    parse_number,
    pick_category_slug,
    pick_country_slug,
    select_candidates,
)


def test_normalize_category_slugs() -> None:
    assert normalize_category_slugs(["en:Breakfast-Cereals", "cereals", " "]) == [
        "breakfast-cereals",
        "cereals",
    ]


def test_pick_category_slug_skips_generic_only() -> None:
    assert pick_category_slug(["en:foods", "en:snacks", "fr:beverages"]) is None
    assert pick_category_slug([]) is None


def test_pick_category_slug_prefers_noodle_keywords() -> None:
    tags = [
        "en:plant-based-foods-and-beverages",
        "en:noodles",
        "en:instant-noodles",
        "fr:nouilles",
    ]

    assert pick_category_slug(tags) == "instant-noodles"


def test_pick_category_slug_falls_back_to_longest() -> None:
    tags = ["en:spreads", "en:hazelnut-spreads", "en:sweet-spreads"]

    assert pick_category_slug(tags) == "hazelnut-spreads"


def test_english_tag_value_and_country() -> None:
    assert english_tag_value(["fr:france", "en:india"]) == "india"
    assert english_tag_value(["fr:belgique"]) == "belgique"
    assert english_tag_value([]) is None
    assert pick_country_slug("en:germany", ["en:france"]) == "germany"
    assert pick_country_slug(None, ["en:france"]) == "france"
    assert pick_country_slug(None, []) is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [(3, 3.0), ("4.5", 4.5), (" 2 ", 2.0), ("n/a", None), (True, None),
     (float("nan"), None), (None, None)],
)
def test_parse_number(value: object, expected: float | None) -> None:
    assert parse_number(value) == expected


def test_map_candidate_normalizes_fields() -> None:
    candidate = map_candidate(
        {
            "code": 123,
            "product_name": "Soba",
            "brands": "Brand A, Parent",
            "nutrition_grades": "unknown",
            "ecoscore_grade": "B",
            "nova_group": "3",
            "ingredients_from_palm_oil_n": 0,
            "nutriments": {"sugars_100g": 2.5},
            "labels_tags": ["en:organic"],
        }
    )

    assert candidate.code == "123"
    assert candidate.nutrition_grade is None
    assert candidate.ecoscore_grade == "b"
    assert candidate.nova_group == 3
    assert candidate.palm_oil_ingredients_n == 0
    assert candidate.nutriments == {"sugars_100g": 2.5}
    assert candidate.labels_tags == ("en:organic",)
    assert candidate.allergens_tags == ()
    assert candidate.ingredients_text is None
    assert candidate.additives_tags is None


def test_baseline_from_product() -> None:
    baseline = baseline_from_product(
        "42",
        {
            "product_name": "Ramen",
            "categories_tags": ["en:instant-noodles"],
            "nutrition_grades": "d",
            "additives_tags": ["en:e621"],
        },
    )

    assert baseline.code == "42"
    assert baseline.name == "Ramen"
    assert baseline.categories_tags == ("en:instant-noodles",)
    assert baseline.nutrition_grade == "d"
    assert baseline.additives_tags == ("en:e621",)
    assert baseline.additives_n is None


@pytest.mark.parametrize(
    ("categories", "slug", "expected"),
    [
        (("en:instant-noodles",), "instant-noodles", True),
        (("en:instant-noodles",), "noodles", True),
        (("en:noodles",), "instant-noodles", True),
        (("en:noodle-soups",), "noodles", False),
        ((), "noodles", False),
    ],
)
def test_belongs_to_category(
    categories: tuple[str, ...], slug: str, expected: bool
) -> None:
    candidate = Candidate(code="1", categories_tags=categories)

    assert belongs_to_category(candidate, slug) is expected


def test_select_candidates_drops_baseline_and_strays() -> None:
    hits = [
        {"product_name": "no code", "categories_tags": ["en:noodles"]},
        {"code": "base", "categories_tags": ["en:noodles"]},
        {"code": "stray", "categories_tags": ["en:biscuits"]},
        {"code": "keep", "categories_tags": ["en:instant-noodles"]},
    ]

    selected = select_candidates(hits, "base", "noodles")

    assert [candidate.code for candidate in selected] == ["keep"]
