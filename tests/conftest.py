"""Shared test fixtures."""

from dataclasses import dataclass, field

import httpx
import pytest

from vegwise.adapters.deepl_client import TranslationClient
from vegwise.adapters.off_client import OpenFoodFactsClient
from vegwise.config import Settings
from vegwise.containers import AppContainer
from vegwise.services.alternatives import AlternativesService
from vegwise.services.catalog import CatalogService
from vegwise.services.products import ProductService
from vegwise.services.rules import RuleBook, default_rule_book
from vegwise.services.translation import TranslationService


def _http_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://off.test")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("boom", request=request, response=response)


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Fake Open Food Facts client with in-memory products."""

    products: dict[str, dict[str, object]] = field(default_factory=dict)
    search_payload: dict[str, object] = field(
        default_factory=lambda: {"products": []}
    )
    failing_versions: set[str] = field(default_factory=set)
    malformed_versions: set[str] = field(default_factory=set)
    fail_search: bool = False
    product_calls: list[tuple[str, str, str | None]] = field(default_factory=list)
    search_calls: list[dict[str, str]] = field(default_factory=list)

    async def get_product(
        self, barcode: str, api_version: str = "v2", language: str | None = None
    ) -> dict[str, object]:
        self.product_calls.append((barcode, api_version, language))
        if api_version in self.failing_versions:
            raise _http_error(503)
        if api_version in self.malformed_versions:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        product = self.products.get(barcode)
        if product is None:
            return {"status": 0, "code": barcode}
        return {"status": 1, "code": barcode, "product": product}

    async def search_products(self, params: dict[str, str]) -> dict[str, object]:
        self.search_calls.append(params)
        if self.fail_search:
            raise _http_error(500)
        return self.search_payload


@dataclass
class FakeTranslationClient(TranslationClient):
    """Fake translation client returning a fixed translation."""

    translated_text: str = "translated"
    detected_lang: str = "FR"
    fail: bool = False
    calls: list[tuple[str, str, str | None]] = field(default_factory=list)

    async def translate(
        self, text: str, target_lang: str, source_lang: str | None = None
    ) -> dict[str, object]:
        self.calls.append((text, target_lang, source_lang))
        if self.fail:
            raise _http_error(456)
        return {
            "translations": [
                {
                    "text": self.translated_text,
                    "detected_source_language": self.detected_lang,
                }
            ]
        }


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def rule_book() -> RuleBook:
    return default_rule_book()


@pytest.fixture
def off_client() -> FakeOpenFoodFactsClient:
    return FakeOpenFoodFactsClient()


@pytest.fixture
def translation_client() -> FakeTranslationClient:
    return FakeTranslationClient()


@pytest.fixture
def container(
    settings: Settings,
    rule_book: RuleBook,
    off_client: FakeOpenFoodFactsClient,
) -> AppContainer:
    product_service = ProductService(client=off_client, retry_delay_seconds=0)
    catalog_service = CatalogService(client=off_client)
    alternatives_service = AlternativesService(
        fetch_product_by_code=product_service.fetch_baseline,
        search_catalog=catalog_service.search_category,
        rule_book=rule_book,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        rule_book=rule_book,
        product_service=product_service,
        catalog_service=catalog_service,
        alternatives_service=alternatives_service,
        close_resources=close_resources,
    )


@pytest.fixture
def translation_service(
    translation_client: FakeTranslationClient,
) -> TranslationService:
    return TranslationService(translation_client)
