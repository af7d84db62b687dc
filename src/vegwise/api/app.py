"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, status

from vegwise.api.schemas import AnalyzeRequest, suggestion_payload
from vegwise.app_logging import configure_logging
from vegwise.config import parse_csv_list
from vegwise.containers import AppContainer
from vegwise.domain.analysis import DietMode
from vegwise.domain.products import (
    Baseline,
    DesiredLabel,
    SortMode,
    SuggestionPrefs,
)
from vegwise.services.analysis import classify


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/analyze")
    async def analyze(payload: AnalyzeRequest, request: Request) -> dict[str, object]:
        """Classify ingredient text for a diet."""
        state_container: AppContainer = request.app.state.container
        result = classify(
            payload.ingredients_text, payload.diet, state_container.rule_book
        )
        return {"analysis": result}

    @app.get("/products/{barcode}")
    async def product(
        barcode: str,
        request: Request,
        diet: DietMode = DietMode.VEGETARIAN,
        lang: str | None = None,
    ) -> dict[str, object]:
        """Look up a product by barcode and classify its ingredients."""
        state_container: AppContainer = request.app.state.container
        product_service = state_container.product_service
        if lang:
            record = await product_service.lookup_localized(barcode, lang)
        else:
            record = await product_service.lookup(barcode)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        analysis = (
            classify(record.ingredients_text, diet, state_container.rule_book)
            if record.ingredients_text
            else None
        )
        return {"product": record, "analysis": analysis}

    @app.get("/alternatives/{barcode}")
    async def alternatives(  # noqa: PLR0913
        barcode: str,
        request: Request,
        diet: DietMode = DietMode.VEGETARIAN,
        avoid: str | None = None,
        labels: str | None = None,
        no_palm: bool = False,
        country: str | None = None,
        limit: int | None = Query(default=None, ge=1, le=50),
        sort: SortMode = SortMode.BALANCED,
    ) -> dict[str, object]:
        """Return ranked alternatives for a product."""
        state_container: AppContainer = request.app.state.container
        try:
            required_labels = tuple(
                DesiredLabel(label.lower()) for label in parse_csv_list(labels)
            )
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        prefs = SuggestionPrefs(
            diet=diet,
            avoid_allergens=tuple(parse_csv_list(avoid)),
            palm_oil_free=no_palm,
            required_labels=required_labels,
            country_tag=country or None,
            limit=limit or state_container.settings.default_suggestion_limit,
            sort=sort,
        )
        suggestions = await state_container.alternatives_service.rank_alternatives(
            Baseline(code=barcode), prefs
        )
        if not suggestions:
            logger.info("No alternatives found for %s", barcode)
        return {"suggestions": [suggestion_payload(item) for item in suggestions]}

    return app
