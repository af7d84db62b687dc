"""DeepL translation API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class TranslationClient(Protocol):
    """Interface for text translation."""

    async def translate(
        self, text: str, target_lang: str, source_lang: str | None = None
    ) -> dict[str, object]:
        """Translate text and return raw API data."""


@dataclass
class HttpxDeepLClient(TranslationClient):
    """HTTPX-backed DeepL client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxDeepLClient":
        """Create a DeepL client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def translate(
        self, text: str, target_lang: str, source_lang: str | None = None
    ) -> dict[str, object]:
        """Translate text with DeepL's /translate endpoint."""
        data = {"text": text, "target_lang": target_lang.upper()}
        if source_lang:
            data["source_lang"] = source_lang.upper()
        response = await self.http_client.post(
            f"{self.base_url}/translate",
            headers={"Authorization": f"DeepL-Auth-Key {self.api_key}"},
            data=data,
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
