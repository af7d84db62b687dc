"""Open Food Facts API client."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import httpx


class OpenFoodFactsClient(Protocol):
    """Interface for Open Food Facts API interactions."""

    async def get_product(
        self, barcode: str, api_version: str = "v2", language: str | None = None
    ) -> dict[str, object]:
        """Fetch a product by barcode and return raw API data."""

    async def search_products(self, params: dict[str, str]) -> dict[str, object]:
        """Run a product search and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls, base_url: str, user_agent: str, timeout_seconds: float = 10.0
    ) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        http_client = httpx.AsyncClient(
            headers={"User-Agent": user_agent, "Accept": "application/json"}
        )
        return cls(
            base_url=base_url,
            http_client=http_client,
            timeout_seconds=timeout_seconds,
        )

    async def get_product(
        self, barcode: str, api_version: str = "v2", language: str | None = None
    ) -> dict[str, object]:
        """Fetch a product from the v2 API or the legacy v0 `.json` endpoint."""
        code = quote(barcode, safe="")
        if api_version == "v0":
            url = f"{self.base_url}/api/v0/product/{code}.json"
        else:
            url = f"{self.base_url}/api/v2/product/{code}"
        headers = {"Accept-Language": language} if language else None
        response = await self.http_client.get(
            url, headers=headers, timeout=self.timeout_seconds
        )
        response.raise_for_status()
        return response.json()

    async def search_products(self, params: dict[str, str]) -> dict[str, object]:
        """Search products with the v2 search API."""
        response = await self.http_client.get(
            f"{self.base_url}/api/v2/search",
            params=params,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
