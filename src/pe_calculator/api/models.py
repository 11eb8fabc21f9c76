"""Pydantic models for the calculator HTTP API."""

from uuid import UUID

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr

NAME_MAX_LENGTH = 200

GramInput = StrictStr | StrictInt | StrictFloat


class EntryInput(BaseModel):
    """Gram fields as typed by the user, either numbers or text."""

    protein: GramInput | None = None
    fat: GramInput | None = None
    total_carb: GramInput | None = None
    fiber: GramInput | None = None
    servings: GramInput | None = None
    label: str | None = Field(default=None, max_length=NAME_MAX_LENGTH)


class RecipeInput(BaseModel):
    """Recipe name payload."""

    name: str = Field(default="", max_length=NAME_MAX_LENGTH)


class RatioView(BaseModel):
    """P:E ratio with its tag and display text."""

    kind: str
    value: float | None
    display: str


class DerivedView(BaseModel):
    """Derived values for an entry or the totals."""

    net_carb_g: float
    energy_g: float
    ratio: RatioView


class AmountsView(BaseModel):
    """Gram amounts."""

    protein_g: float
    fat_g: float
    total_carb_g: float
    fiber_g: float


class EntryView(BaseModel):
    """One entry with its per-serving values, amounts used and derived values."""

    id: UUID
    label: str
    display_label: str
    servings: float
    per_serving: AmountsView
    amounts: AmountsView
    derived: DerivedView


class TotalsView(BaseModel):
    """Aggregate of all entries."""

    entry_count: int
    amounts: AmountsView
    derived: DerivedView


class EntriesView(BaseModel):
    """All entries in order plus totals."""

    title: str
    entries: list[EntryView]
    totals: TotalsView


class RecipeView(BaseModel):
    """Recipe name and the title shown for it."""

    name: str
    title: str
