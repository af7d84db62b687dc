"""Ingredient text translation."""

import logging
from dataclasses import dataclass

from vegwise.adapters.deepl_client import TranslationClient

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Translation:
    """Translated text with the detected source language."""

    text: str
    detected_lang: str | None


@dataclass
class TranslationService:
    """Translates text, keeping the original when translation fails."""

    client: TranslationClient

    async def translate(
        self, text: str, target: str = "EN", source: str | None = None
    ) -> Translation:
        """Translate text into the target language."""
        if not text or (source and source.lower() == target.lower()):
            return Translation(text=text, detected_lang=source)
        try:
            payload = await self.client.translate(text, target, source)
        except Exception as exc:
            _logger.warning("Translation to %s failed: %s", target, exc)
            return Translation(text=text, detected_lang=source)

        translations = payload.get("translations")
        first = (
            translations[0] if isinstance(translations, list) and translations else {}
        )
        if not isinstance(first, dict):
            return Translation(text=text, detected_lang=source)
        detected = first.get("detected_source_language")
        return Translation(
            text=str(first.get("text") or text),
            detected_lang=detected if isinstance(detected, str) else source,
        )
