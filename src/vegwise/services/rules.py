"""Static diet rule tables and rule inheritance resolution."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from vegwise.domain.analysis import (
    PATTERNS_CATEGORY,
    DietMode,
    DietRule,
    FlagLevel,
    RuleSet,
)

DEFAULT_RULES_PATH = Path(__file__).resolve().parent.parent / "data" / "rules.json"

_logger = logging.getLogger(__name__)


class RuleBookError(ValueError):
    """Raised when a rule table cannot be parsed."""


@dataclass(frozen=True)
class RuleBook:
    """Read-only diet rules and allergen terms, loaded once per process."""

    diets: Mapping[str, DietRule]
    allergens: Mapping[str, tuple[str, ...]]


def load_rule_book(path: Path | None = None) -> RuleBook:
    """Load and parse a rule table from a JSON file."""
    resolved = path or DEFAULT_RULES_PATH
    with resolved.open(encoding="utf-8") as handle:
        data = json.load(handle)
    rule_book = parse_rule_book(data)
    _logger.info(
        "Loaded %s diet rules and %s allergens from %s",
        len(rule_book.diets),
        len(rule_book.allergens),
        resolved,
    )
    return rule_book


@lru_cache(maxsize=1)
def default_rule_book() -> RuleBook:
    """Return the packaged rule table, parsed on first use."""
    return load_rule_book()


def parse_rule_book(data: object) -> RuleBook:
    """Build a RuleBook from decoded JSON data."""
    if not isinstance(data, dict):
        raise RuleBookError("Rule table must be a JSON object")
    raw_diets = data.get("diets", {})
    raw_allergens = data.get("allergens", {})
    if not isinstance(raw_diets, dict) or not isinstance(raw_allergens, dict):
        raise RuleBookError("'diets' and 'allergens' must be objects")

    diets = {name: parse_diet_rule(name, raw) for name, raw in raw_diets.items()}
    allergens = {
        name: _parse_terms(f"allergens.{name}", terms)
        for name, terms in raw_allergens.items()
    }
    return RuleBook(
        diets=MappingProxyType(diets),
        allergens=MappingProxyType(allergens),
    )


def parse_diet_rule(name: str, raw: object) -> DietRule:
    """Parse a single diet rule layer."""
    if not isinstance(raw, dict):
        raise RuleBookError(f"Diet rule '{name}' must be an object")
    extends = raw.get("extends")
    if extends is not None and not isinstance(extends, str):
        raise RuleBookError(f"Diet rule '{name}' has a non-string 'extends'")
    raw_blocklist = raw.get("blocklist") or {}
    if not isinstance(raw_blocklist, dict):
        raise RuleBookError(f"Diet rule '{name}' blocklist must be an object")
    blocklist = {
        category: _parse_terms(f"{name}.blocklist.{category}", terms)
        for category, terms in raw_blocklist.items()
    }
    patterns = _parse_terms(f"{name}.patterns", raw.get("patterns") or [])
    raw_flags = raw.get("flags") or {}
    if not isinstance(raw_flags, dict):
        raise RuleBookError(f"Diet rule '{name}' flags must be an object")
    try:
        flags = {term: FlagLevel(level) for term, level in raw_flags.items()}
    except ValueError as exc:
        raise RuleBookError(f"Diet rule '{name}' has an invalid flag: {exc}") from exc
    return DietRule(
        extends=extends, blocklist=blocklist, patterns=patterns, flags=flags
    )


def resolve_rule_set(rule_book: RuleBook, diet: DietMode | str) -> RuleSet:
    """Flatten a diet's `extends` chain into one rule set.

    Layers are merged from the root ancestor down to the requested diet, so
    flags declared by a child override the same key in a parent. Blocklist
    terms are unioned per category in first-seen order. A name that was
    already visited stops the walk instead of raising, and so does a name
    missing from the table.
    """
    chain: list[DietRule] = []
    seen: set[str] = set()
    cursor: str | None = diet.value if isinstance(diet, DietMode) else diet
    while cursor:
        if cursor in seen:
            _logger.debug("Rule cycle detected at %s", cursor)
            break
        seen.add(cursor)
        rule = rule_book.diets.get(cursor)
        if rule is None:
            break
        chain.insert(0, rule)
        cursor = rule.extends

    blocklist: dict[str, list[str]] = {}
    flags: dict[str, FlagLevel] = {}
    for layer in chain:
        for category, terms in layer.blocklist.items():
            _merge_terms(blocklist.setdefault(category, []), terms)
        if layer.patterns:
            _merge_terms(blocklist.setdefault(PATTERNS_CATEGORY, []), layer.patterns)
        flags.update(layer.flags)

    return RuleSet(
        blocklist={category: tuple(terms) for category, terms in blocklist.items()},
        flags=flags,
    )


def _merge_terms(bucket: list[str], terms: tuple[str, ...]) -> None:
    for term in terms:
        if term not in bucket:
            bucket.append(term)


def _parse_terms(location: str, terms: object) -> tuple[str, ...]:
    if not isinstance(terms, list) or not all(isinstance(t, str) for t in terms):
        raise RuleBookError(f"{location} must be a list of strings")
    return tuple(terms)
