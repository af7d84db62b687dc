"""Category-scoped catalog search."""

import logging
from dataclasses import dataclass

from vegwise.adapters.off_client import OpenFoodFactsClient

SEARCH_FIELDS = (
    "code",
    "product_name",
    "brands",
    "image_url",
    "categories_tags",
    "countries_tags",
    "labels_tags",
    "ingredients_analysis_tags",
    "allergens_tags",
    "traces_tags",
    "nutrition_grades",
    "nova_group",
    "ecoscore_grade",
    "ecoscore_score",
    "ingredients_from_palm_oil_n",
    "nutriments",
    "additives_n",
    "additives_tags",
    "ingredients_text",
)

_logger = logging.getLogger(__name__)


@dataclass
class CatalogService:
    """Searches the catalog for products in one category."""

    client: OpenFoodFactsClient
    page_size: int = 50

    def build_search_params(
        self, category_slug: str, country_slug: str | None = None, page: int = 1
    ) -> dict[str, str]:
        """Query parameters for a category search with a fixed field projection."""
        params = {
            "fields": ",".join(SEARCH_FIELDS),
            "page": str(page),
            "page_size": str(self.page_size),
            "categories_tags_en": category_slug,
        }
        if country_slug:
            params["countries_tags_en"] = country_slug
        return params

    async def search_category(
        self, category_slug: str, country_slug: str | None = None
    ) -> list[dict[str, object]]:
        """Return raw product hits for a category; errors propagate to the caller."""
        payload = await self.client.search_products(
            self.build_search_params(category_slug, country_slug)
        )
        products = payload.get("products")
        if not isinstance(products, list):
            return []
        hits = [hit for hit in products if isinstance(hit, dict)]
        _logger.debug(
            "Catalog search category=%s country=%s hits=%s",
            category_slug,
            country_slug,
            len(hits),
        )
        return hits
