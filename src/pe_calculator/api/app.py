"""FastAPI application factory."""

import logging
from http import HTTPStatus
from uuid import UUID

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from pe_calculator.api.models import (
    AmountsView,
    DerivedView,
    EntriesView,
    EntryInput,
    EntryView,
    RatioView,
    RecipeInput,
    RecipeView,
    TotalsView,
)
from pe_calculator.app_logging import configure_logging
from pe_calculator.containers import AppContainer
from pe_calculator.domain.macros import SERVINGS, MacroAmounts, MacroEntry, MacroField
from pe_calculator.domain.ratios import DerivedValues
from pe_calculator.errors import EntryNotFoundError, InvalidInputError
from pe_calculator.services.formatting import Formatter
from pe_calculator.services.parsing import parse_grams


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app bound to one calculator session."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI(title="P:E Diet Calculator")
    app.state.container = container

    @app.exception_handler(InvalidInputError)
    async def invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
        logger.info("Rejected input: field=%s reason=%s", exc.field, exc.reason)
        return JSONResponse(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            content={"detail": str(exc), "field": exc.field, "reason": exc.reason},
        )

    @app.exception_handler(EntryNotFoundError)
    async def entry_not_found(
        request: Request, exc: EntryNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/entries")
    async def list_entries(request: Request) -> EntriesView:
        """Return all entries in order with their derived values and totals."""
        state_container: AppContainer = request.app.state.container
        store = state_container.store
        formatter = state_container.formatter
        return EntriesView(
            title=formatter.title(store.recipe_name),
            entries=[
                _entry_view(entry, store.get_derived(entry.id), formatter)
                for entry in store.list_entries()
            ],
            totals=_totals_view(state_container),
        )

    @app.post("/entries", status_code=status.HTTP_201_CREATED)
    async def add_entry(
        request: Request, payload: EntryInput | None = None
    ) -> EntryView:
        """Append an entry; omitted fields default to zero."""
        state_container: AppContainer = request.app.state.container
        store = state_container.store
        payload = payload or EntryInput()
        fields, servings = _parse_input(payload)
        entry_id = store.add_entry(
            fields,
            label=payload.label or "",
            servings=1.0 if servings is None else servings,
        )
        return _entry_view(
            store.get_entry(entry_id),
            store.get_derived(entry_id),
            state_container.formatter,
        )

    @app.patch("/entries/{entry_id}")
    async def update_entry(
        entry_id: UUID, payload: EntryInput, request: Request
    ) -> EntryView:
        """Edit an entry; nothing changes if any value is rejected."""
        state_container: AppContainer = request.app.state.container
        store = state_container.store
        fields, servings = _parse_input(payload)
        if not store.update_entry(
            entry_id, fields, servings=servings, label=payload.label
        ):
            raise EntryNotFoundError(entry_id)
        return _entry_view(
            store.get_entry(entry_id),
            store.get_derived(entry_id),
            state_container.formatter,
        )

    @app.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def remove_entry(entry_id: UUID, request: Request) -> Response:
        """Remove an entry; unknown ids are accepted silently."""
        state_container: AppContainer = request.app.state.container
        state_container.store.remove_entry(entry_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/entries/{entry_id}/derived")
    async def entry_derived(entry_id: UUID, request: Request) -> DerivedView:
        """Return derived values for one entry."""
        state_container: AppContainer = request.app.state.container
        return _derived_view(
            state_container.store.get_derived(entry_id), state_container.formatter
        )

    @app.get("/totals")
    async def totals(request: Request) -> TotalsView:
        """Return the aggregate of all entries."""
        return _totals_view(request.app.state.container)

    @app.get("/recipe")
    async def get_recipe(request: Request) -> RecipeView:
        state_container: AppContainer = request.app.state.container
        name = state_container.store.recipe_name
        return RecipeView(name=name, title=state_container.formatter.title(name))

    @app.put("/recipe")
    async def set_recipe(payload: RecipeInput, request: Request) -> RecipeView:
        """Set the optional recipe name."""
        state_container: AppContainer = request.app.state.container
        state_container.store.set_recipe_name(payload.name)
        name = state_container.store.recipe_name
        return RecipeView(name=name, title=state_container.formatter.title(name))

    return app


def _parse_input(payload: EntryInput) -> tuple[dict[MacroField, float], float | None]:
    fields: dict[MacroField, float] = {}
    for macro in MacroField:
        raw = getattr(payload, macro.value)
        if raw is not None:
            fields[macro] = parse_grams(raw, macro)
    servings = None
    if payload.servings is not None:
        servings = parse_grams(payload.servings, SERVINGS)
    return fields, servings


def _amounts_view(amounts: MacroAmounts) -> AmountsView:
    return AmountsView(
        protein_g=amounts.protein_g,
        fat_g=amounts.fat_g,
        total_carb_g=amounts.total_carb_g,
        fiber_g=amounts.fiber_g,
    )


def _derived_view(derived: DerivedValues, formatter: Formatter) -> DerivedView:
    return DerivedView(
        net_carb_g=derived.net_carb_g,
        energy_g=derived.energy_g,
        ratio=RatioView(
            kind=derived.ratio.kind.value,
            value=derived.ratio.value,
            display=formatter.ratio(derived.ratio),
        ),
    )


def _entry_view(
    entry: MacroEntry, derived: DerivedValues, formatter: Formatter
) -> EntryView:
    return EntryView(
        id=entry.id,
        label=entry.label,
        display_label=formatter.label(entry.label),
        servings=entry.servings,
        per_serving=_amounts_view(entry.per_serving),
        amounts=_amounts_view(entry.amounts),
        derived=_derived_view(derived, formatter),
    )


def _totals_view(container: AppContainer) -> TotalsView:
    store = container.store
    return TotalsView(
        entry_count=len(store),
        amounts=_amounts_view(store.get_aggregate()),
        derived=_derived_view(store.get_aggregate_derived(), container.formatter),
    )
