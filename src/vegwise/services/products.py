"""Product lookup by barcode against Open Food Facts."""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace

import httpx

from vegwise.adapters.off_client import OpenFoodFactsClient
from vegwise.domain.products import Baseline, ProductRecord
from vegwise.services.candidates import baseline_from_product, parse_number
from vegwise.services.translation import TranslationService

_API_VERSIONS = ("v2", "v0")

_logger = logging.getLogger(__name__)


@dataclass
class ProductService:
    """Looks up products and maps them into domain records."""

    client: OpenFoodFactsClient
    translation_service: TranslationService | None = None
    retry_delay_seconds: float = 1.0
    translate_to: str = "EN"

    async def lookup(self, barcode: str) -> ProductRecord | None:
        """Fetch a product, retrying once on the legacy endpoint after a failure."""
        for attempt, api_version in enumerate(_API_VERSIONS, start=1):
            try:
                payload = await self.client.get_product(
                    barcode, api_version=api_version
                )
            except httpx.HTTPError as exc:
                _logger.warning(
                    "Product lookup failed (attempt %s/%s, api=%s, status=%s) "
                    "barcode=%s: %s",
                    attempt,
                    len(_API_VERSIONS),
                    api_version,
                    http_status(exc) or "n/a",
                    barcode,
                    exc,
                )
                if attempt < len(_API_VERSIONS):
                    await asyncio.sleep(self.retry_delay_seconds)
                    continue
                return None
            except ValueError as exc:
                _logger.warning(
                    "Product lookup returned unreadable data api=%s barcode=%s: %s",
                    api_version,
                    barcode,
                    exc,
                )
                return None
            product = _found_product(payload)
            if product is None:
                return None
            return product_record(barcode, product)
        return None

    async def lookup_localized(
        self, barcode: str, preferred_lang: str | None = None
    ) -> ProductRecord | None:
        """Fetch a product with localized fields, translating ingredients if set up."""
        try:
            payload = await self.client.get_product(barcode, language=preferred_lang)
        except Exception as exc:
            _logger.warning("Localized lookup failed barcode=%s: %s", barcode, exc)
            return None
        product = _found_product(payload)
        if product is None:
            return None

        original, lang = pick_lang_field(product, "ingredients_text", preferred_lang)
        name, _ = pick_lang_field(product, "product_name", preferred_lang)
        ingredients = original
        if (
            ingredients
            and self.translation_service is not None
            and self.translate_to.lower() != (lang or "").lower()
        ):
            translation = await self.translation_service.translate(
                ingredients, self.translate_to
            )
            ingredients = translation.text or ingredients

        record = product_record(barcode, product)
        return replace(
            record,
            name=name or record.name,
            ingredients_text=ingredients,
            ingredients_original=original,
            ingredients_lang=lang,
        )

    async def fetch_baseline(self, code: str) -> Baseline | None:
        """Fetch category and quality data for a baseline product."""
        try:
            payload = await self.client.get_product(code)
        except Exception as exc:
            _logger.warning("Baseline fetch failed code=%s: %s", code, exc)
            return None
        product = _found_product(payload)
        if product is None:
            return None
        return baseline_from_product(str(payload.get("code") or code), product)


def _found_product(payload: Mapping[str, object]) -> Mapping[str, object] | None:
    """Return the product payload when the API reports it as found."""
    product = payload.get("product")
    if payload.get("status") != 1 or not isinstance(product, dict):
        return None
    return product


def http_status(exc: httpx.HTTPError) -> int | None:
    """Response status of a failed request; transport errors have none."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


def _trimmed(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def pick_lang_field(
    product: Mapping[str, object], base: str, preferred: str | None = None
) -> tuple[str | None, str | None]:
    """Pick `<base>_<lang>`, then the short lang, then English, then `<base>`."""
    tries: list[str] = []
    if preferred:
        lowered = preferred.lower()
        tries.append(lowered)
        short = lowered.split("-")[0]
        if short and short != lowered:
            tries.append(short)
    tries.append("en")
    for lang in tries:
        value = _trimmed(product.get(f"{base}_{lang}"))
        if value:
            return value, lang
    return _trimmed(product.get(base)), None


def product_record(barcode: str, product: Mapping[str, object]) -> ProductRecord:
    """Map an Open Food Facts product payload into a ProductRecord."""
    nutriments = product.get("nutriments")
    if not isinstance(nutriments, dict):
        nutriments = {}
    allergens = product.get("allergens_tags")
    return ProductRecord(
        barcode=barcode,
        name=_trimmed(product.get("product_name")),
        brands=_trimmed(product.get("brands")),
        ingredients_text=_trimmed(product.get("ingredients_text_en"))
        or _trimmed(product.get("ingredients_text")),
        allergens=tuple(str(tag) for tag in allergens)
        if isinstance(allergens, list)
        else (),
        energy_kcal_100g=parse_number(nutriments.get("energy-kcal_100g")),
        sugars_100g=parse_number(nutriments.get("sugars_100g")),
        proteins_100g=parse_number(nutriments.get("proteins_100g")),
        serving_size=_trimmed(product.get("serving_size")),
        image_url=_trimmed(product.get("image_url")),
    )
