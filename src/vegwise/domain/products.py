"""Product, candidate and suggestion models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from vegwise.domain.analysis import DietMode, Verdict

Grade = Literal["a", "b", "c", "d", "e"]

GRADE_ORDER: tuple[Grade, ...] = ("a", "b", "c", "d", "e")


class SortMode(str, Enum):
    """How suggestions are ordered."""

    BALANCED = "balanced"
    NUTRI = "nutri"
    NOVA = "nova"
    ECO = "eco"
    SUGAR = "sugar"
    SALT = "salt"


class DesiredLabel(str, Enum):
    """Labels a user can require on alternatives."""

    VEGAN = "vegan"
    ORGANIC = "organic"
    HALAL = "halal"
    KOSHER = "kosher"


@dataclass(frozen=True)
class Baseline:
    """Reference product that alternatives are compared against."""

    code: str
    name: str | None = None
    categories_tags: tuple[str, ...] = ()
    countries_tags: tuple[str, ...] = ()
    nutrition_grade: Grade | None = None
    nova_group: int | None = None
    ecoscore_grade: Grade | None = None
    ecoscore_score: float | None = None
    nutriments: dict[str, object] = field(default_factory=dict)
    additives_n: int | None = None
    additives_tags: tuple[str, ...] | None = None
    palm_oil_ingredients_n: int | None = None


@dataclass(frozen=True)
class Candidate:
    """Catalog search hit evaluated as a possible alternative."""

    code: str
    product_name: str | None = None
    brands: str | None = None
    image_url: str | None = None
    categories_tags: tuple[str, ...] = ()
    countries_tags: tuple[str, ...] = ()
    labels_tags: tuple[str, ...] = ()
    ingredients_analysis_tags: tuple[str, ...] = ()
    allergens_tags: tuple[str, ...] = ()
    traces_tags: tuple[str, ...] = ()
    nutrition_grade: Grade | None = None
    nova_group: int | None = None
    ecoscore_grade: Grade | None = None
    ecoscore_score: float | None = None
    nutriments: dict[str, object] = field(default_factory=dict)
    additives_n: int | None = None
    additives_tags: tuple[str, ...] | None = None
    palm_oil_ingredients_n: int | None = None
    ingredients_text: str | None = None


@dataclass(frozen=True)
class SuggestionPrefs:
    """User-selected constraints for alternative suggestions."""

    diet: DietMode
    avoid_allergens: tuple[str, ...] = ()
    palm_oil_free: bool = False
    required_labels: tuple[DesiredLabel, ...] = ()
    country_tag: str | None = None
    limit: int = 8
    sort: SortMode = SortMode.BALANCED


@dataclass(frozen=True)
class MetricDelta:
    """Baseline value and candidate value for one metric."""

    from_value: object | None
    to_value: object | None


@dataclass(frozen=True)
class SuggestionDeltas:
    """Per-metric comparison between baseline and candidate."""

    nutri: MetricDelta | None = None
    nova: MetricDelta | None = None
    eco: MetricDelta | None = None
    sugars_100g: MetricDelta | None = None
    salt_100g: MetricDelta | None = None
    additives: MetricDelta | None = None


@dataclass(frozen=True)
class SuggestionBadges:
    """Badges displayed next to a suggestion."""

    palm_oil_free: bool
    labels: tuple[DesiredLabel, ...]


@dataclass(frozen=True)
class Suggestion:
    """Candidate that passed every filter, with its comparison to the baseline."""

    candidate: Candidate
    diet_verdict: Verdict
    badges: SuggestionBadges
    deltas: SuggestionDeltas
    score: float


@dataclass(frozen=True)
class ProductRecord:
    """Product looked up by barcode."""

    barcode: str
    name: str | None
    brands: str | None
    ingredients_text: str | None
    allergens: tuple[str, ...]
    energy_kcal_100g: float | None
    sugars_100g: float | None
    proteins_100g: float | None
    serving_size: str | None
    image_url: str | None
    ingredients_original: str | None = None
    ingredients_lang: str | None = None
