"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from vegwise.adapters.deepl_client import HttpxDeepLClient
from vegwise.adapters.off_client import HttpxOpenFoodFactsClient
from vegwise.config import Settings
from vegwise.services.alternatives import AlternativesService
from vegwise.services.catalog import CatalogService
from vegwise.services.products import ProductService
from vegwise.services.rules import RuleBook, default_rule_book, load_rule_book
from vegwise.services.translation import TranslationService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    rule_book: RuleBook
    product_service: ProductService
    catalog_service: CatalogService
    alternatives_service: AlternativesService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    rule_book = (
        load_rule_book(Path(resolved_settings.rules_path))
        if resolved_settings.rules_path
        else default_rule_book()
    )
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.off_base_url,
        user_agent=resolved_settings.off_user_agent,
        timeout_seconds=resolved_settings.off_timeout_seconds,
    )
    deepl_client = (
        HttpxDeepLClient.create(
            api_key=resolved_settings.deepl_api_key,
            base_url=resolved_settings.deepl_base_url,
        )
        if resolved_settings.deepl_api_key
        else None
    )
    product_service = ProductService(
        client=off_client,
        translation_service=TranslationService(deepl_client) if deepl_client else None,
        retry_delay_seconds=resolved_settings.off_retry_delay_seconds,
    )
    catalog_service = CatalogService(
        client=off_client,
        page_size=resolved_settings.off_search_page_size,
    )
    alternatives_service = AlternativesService(
        fetch_product_by_code=product_service.fetch_baseline,
        search_catalog=catalog_service.search_category,
        rule_book=rule_book,
    )

    async def close_resources() -> None:
        await off_client.close()
        if deepl_client is not None:
            await deepl_client.close()

    return AppContainer(
        settings=resolved_settings,
        rule_book=rule_book,
        product_service=product_service,
        catalog_service=catalog_service,
        alternatives_service=alternatives_service,
        close_resources=close_resources,
    )
