"""Pydantic models and payload helpers for the HTTP API."""

from dataclasses import asdict, fields

from pydantic import BaseModel, Field

from vegwise.domain.analysis import DietMode
from vegwise.domain.products import MetricDelta, Suggestion


class AnalyzeRequest(BaseModel):
    """Ingredient text to classify for a diet."""

    ingredients_text: str | None = Field(default=None, max_length=20000)
    diet: DietMode = DietMode.VEGETARIAN


def delta_payload(delta: MetricDelta | None) -> dict[str, object] | None:
    """Render a metric delta as `{"from": ..., "to": ...}`."""
    if delta is None:
        return None
    return {"from": delta.from_value, "to": delta.to_value}


def suggestion_payload(suggestion: Suggestion) -> dict[str, object]:
    """Serialize a suggestion for the alternatives endpoint."""
    payload = asdict(suggestion)
    payload["deltas"] = {
        item.name: delta_payload(getattr(suggestion.deltas, item.name))
        for item in fields(suggestion.deltas)
    }
    return payload
