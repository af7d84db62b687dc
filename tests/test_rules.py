"""Tests for rule table loading and inheritance resolution."""

import json

import pytest

from vegwise.domain.analysis import DietMode, FlagLevel, RuleSet
from vegwise.services.rules import (
    RuleBook,
    RuleBookError,
    load_rule_book,
    parse_rule_book,
    resolve_rule_set,
)


def test_packaged_rules_define_every_diet(rule_book: RuleBook) -> None:
    assert set(rule_book.diets) == {mode.value for mode in DietMode}
    assert rule_book.diets["vegan"].extends == "vegetarian"
    assert rule_book.diets["jain"].extends == "vegan"


def test_vegan_inherits_vegetarian_terms(rule_book: RuleBook) -> None:
    rule_set = resolve_rule_set(rule_book, DietMode.VEGAN)

    assert "beef" in rule_set.blocklist["meat"]
    assert "milk" in rule_set.blocklist["dairy"]
    assert rule_set.blocklist["animal_products"][0] == "gelatin"
    assert rule_set.blocklist["animal_products"][-3:] == ("shellac", "e904", "lanolin")
    assert rule_set.patterns[0] == "gelatin"
    assert "whey" in rule_set.patterns
    assert rule_set.flags == {}


def test_jain_carries_flags(rule_book: RuleBook) -> None:
    rule_set = resolve_rule_set(rule_book, "jain")

    assert rule_set.flags["yeast"] is FlagLevel.UNSURE
    assert rule_set.flags["vinegar"] is FlagLevel.WARNING
    assert "onion" in rule_set.blocklist["roots"]
    assert "milk" in rule_set.blocklist["dairy"]


def test_resolution_terminates_on_cycle() -> None:
    book = parse_rule_book(
        {
            "diets": {
                "a": {"extends": "b", "blocklist": {"meat": ["beef"]}},
                "b": {"extends": "a", "blocklist": {"meat": ["pork", "beef"]}},
            }
        }
    )

    assert resolve_rule_set(book, "a").blocklist == {"meat": ("pork", "beef")}
    assert resolve_rule_set(book, "b").blocklist == {"meat": ("beef", "pork")}


def test_self_reference_resolves() -> None:
    book = parse_rule_book({"diets": {"a": {"extends": "a", "patterns": ["x"]}}})

    assert resolve_rule_set(book, "a").patterns == ("x",)


def test_missing_parent_and_unknown_diet() -> None:
    book = parse_rule_book(
        {"diets": {"child": {"extends": "ghost", "blocklist": {"egg": ["egg"]}}}}
    )

    assert resolve_rule_set(book, "child").blocklist == {"egg": ("egg",)}
    assert resolve_rule_set(book, "nobody") == RuleSet(blocklist={}, flags={})


def test_child_flags_override_parent() -> None:
    book = parse_rule_book(
        {
            "diets": {
                "base": {"flags": {"yeast": "warning", "vinegar": "warning"}},
                "child": {"extends": "base", "flags": {"yeast": "unsure"}},
            }
        }
    )

    flags = resolve_rule_set(book, "child").flags

    assert flags == {"yeast": FlagLevel.UNSURE, "vinegar": FlagLevel.WARNING}


def test_merge_keeps_first_seen_order_and_case() -> None:
    book = parse_rule_book(
        {
            "diets": {
                "base": {"blocklist": {"dairy": ["Milk"]}},
                "child": {
                    "extends": "base",
                    "blocklist": {"dairy": ["Milk", "whey"], "patterns": ["y"]},
                    "patterns": ["x", "y"],
                },
            }
        }
    )

    rule_set = resolve_rule_set(book, "child")

    assert rule_set.blocklist["dairy"] == ("Milk", "whey")
    assert rule_set.patterns == ("y", "x")


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"diets": []},
        {"diets": {"a": "vegan"}},
        {"diets": {"a": {"extends": 3}}},
        {"diets": {"a": {"blocklist": {"meat": "beef"}}}},
        {"diets": {"a": {"flags": {"yeast": "maybe"}}}},
        {"allergens": {"milk": [1]}},
    ],
)
def test_parse_rejects_malformed_tables(data: object) -> None:
    with pytest.raises(RuleBookError):
        parse_rule_book(data)


def test_load_rule_book_from_file(tmp_path) -> None:
    path = tmp_path / "rules.json"
    path.write_text(
        json.dumps(
            {
                "diets": {"vegetarian": {"blocklist": {"meat": ["beef"]}}},
                "allergens": {"milk": ["milk"]},
            }
        ),
        encoding="utf-8",
    )

    book = load_rule_book(path)

    assert book.allergens == {"milk": ("milk",)}
    assert book.diets["vegetarian"].blocklist == {"meat": ("beef",)}
