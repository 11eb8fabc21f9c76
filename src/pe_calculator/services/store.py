"""Entry collection store wired onto the reactive graph."""

import logging
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from pe_calculator.domain.macros import (
    SERVINGS,
    MacroAmounts,
    MacroEntry,
    MacroField,
    parse_field,
    validate_grams,
)
from pe_calculator.domain.ratios import DerivedValues
from pe_calculator.errors import EntryNotFoundError
from pe_calculator.services.aggregation import compute_aggregate
from pe_calculator.services.derivation import derive
from pe_calculator.services.reactive import ReactiveGraph

_logger = logging.getLogger(__name__)


class ChangeKind(StrEnum):
    """Kind of mutation applied to the store."""

    ADDED = "added"
    REMOVED = "removed"
    UPDATED = "updated"
    RENAMED = "renamed"


@dataclass(frozen=True)
class StoreChange:
    """Notification delivered to store listeners after a mutation."""

    kind: ChangeKind
    entry_id: UUID | None = None
    fields: tuple[str, ...] = ()


StoreListener = Callable[[StoreChange], None]


class _EntryCell:
    """Reactive state of one entry: a signal per field plus derived nodes."""

    def __init__(self, graph: ReactiveGraph, entry: MacroEntry) -> None:
        self.id = entry.id
        self.label = graph.signal(entry.label, name=f"label:{entry.id}")
        self.grams = {
            macro: graph.signal(
                entry.per_serving.get(macro), name=f"{macro}:{entry.id}"
            )
            for macro in MacroField
        }
        self.servings = graph.signal(entry.servings, name=f"servings:{entry.id}")
        self.amounts = graph.computed(self._compute_amounts, name=f"amounts:{entry.id}")
        self.derived = graph.computed(
            lambda: derive(self.amounts.get()), name=f"derived:{entry.id}"
        )

    def _compute_amounts(self) -> MacroAmounts:
        per_serving = MacroAmounts(
            protein_g=self.grams[MacroField.PROTEIN].get(),
            fat_g=self.grams[MacroField.FAT].get(),
            total_carb_g=self.grams[MacroField.TOTAL_CARB].get(),
            fiber_g=self.grams[MacroField.FIBER].get(),
        )
        return per_serving.scaled(self.servings.get())

    def snapshot(self) -> MacroEntry:
        return MacroEntry(
            id=self.id,
            label=self.label.peek(),
            per_serving=MacroAmounts(
                protein_g=self.grams[MacroField.PROTEIN].peek(),
                fat_g=self.grams[MacroField.FAT].peek(),
                total_carb_g=self.grams[MacroField.TOTAL_CARB].peek(),
                fiber_g=self.grams[MacroField.FIBER].peek(),
            ),
            servings=self.servings.peek(),
        )

    def dispose(self) -> None:
        self.derived.dispose()
        self.amounts.dispose()


class EntryStore:
    """Ordered collection of macro entries and the only write path into it.

    Per-entry derived values depend only on their own entry's gram fields and
    servings. The aggregate depends on the entry order and on every entry's
    amounts. Reads always return values consistent with the latest mutation.
    """

    def __init__(self, graph: ReactiveGraph | None = None, debug: bool = False) -> None:
        self.graph = graph or ReactiveGraph()
        self.debug = debug
        self._cells: dict[UUID, _EntryCell] = {}
        self._order = self.graph.signal((), name="order")
        self._recipe_name = self.graph.signal("", name="recipe_name")
        self._listeners: list[StoreListener] = []
        self._aggregate = self.graph.computed(
            lambda: compute_aggregate(
                self._cells[entry_id].amounts.get() for entry_id in self._order.get()
            ),
            name="aggregate",
        )
        self._aggregate_derived = self.graph.computed(
            lambda: derive(self._aggregate.get()), name="aggregate_derived"
        )

    def __len__(self) -> int:
        return len(self._cells)

    def add_entry(
        self,
        initial: Mapping[MacroField | str, object] | None = None,
        *,
        label: str = "",
        servings: object = 1.0,
    ) -> UUID:
        """Append a new entry and return its id."""
        entry = MacroEntry.create(initial, label=label, servings=servings)
        with self._committing(StoreChange(kind=ChangeKind.ADDED, entry_id=entry.id)):
            self._cells[entry.id] = _EntryCell(self.graph, entry)
            self._order.set((*self._order.peek(), entry.id))
            if self.debug:
                _logger.info(
                    "Entry added: id=%s entries=%s", entry.id, len(self._cells)
                )
        return entry.id

    def remove_entry(self, entry_id: UUID) -> bool:
        """Remove an entry; unknown ids are ignored."""
        cell = self._cells.get(entry_id)
        if cell is None:
            if self.debug:
                _logger.info("Remove ignored, entry not found: id=%s", entry_id)
            return False
        with self._committing(StoreChange(kind=ChangeKind.REMOVED, entry_id=entry_id)):
            del self._cells[entry_id]
            self._order.set(
                tuple(item for item in self._order.peek() if item != entry_id)
            )
            cell.dispose()
            if self.debug:
                _logger.info(
                    "Entry removed: id=%s entries=%s", entry_id, len(self._cells)
                )
        return True

    def update_field(
        self, entry_id: UUID, field: MacroField | str, value: object
    ) -> bool:
        """Replace one gram field; returns False when the entry is gone."""
        return self.update_entry(entry_id, {field: value})

    def set_servings(self, entry_id: UUID, value: object) -> bool:
        """Replace the servings multiplier of an entry."""
        return self.update_entry(entry_id, {}, servings=value)

    def set_label(self, entry_id: UUID, label: str) -> bool:
        """Rename an entry; labels never affect derived values."""
        return self.update_entry(entry_id, {}, label=label)

    def update_entry(
        self,
        entry_id: UUID,
        fields: Mapping[MacroField | str, object],
        *,
        servings: object | None = None,
        label: str | None = None,
    ) -> bool:
        """Apply several edits at once, all or none.

        Every value is validated before anything changes, so a rejected edit
        leaves the entry exactly as it was.
        """
        values: dict[MacroField, float] = {}
        try:
            for key, value in fields.items():
                macro = parse_field(key)
                values[macro] = validate_grams(macro, value)
            new_servings = (
                None if servings is None else validate_grams(SERVINGS, servings)
            )
        except ValueError as exc:
            if self.debug:
                _logger.info("Edit rejected: id=%s error=%s", entry_id, exc)
            raise
        cell = self._cells.get(entry_id)
        if cell is None:
            if self.debug:
                _logger.info("Edit ignored, entry not found: id=%s", entry_id)
            return False
        changed = [str(macro) for macro in values]
        if new_servings is not None:
            changed.append(SERVINGS)
        if label is not None:
            changed.append("label")
        change = StoreChange(
            kind=ChangeKind.UPDATED, entry_id=entry_id, fields=tuple(changed)
        )
        with self._committing(change):
            for macro, number in values.items():
                cell.grams[macro].set(number)
            if new_servings is not None:
                cell.servings.set(new_servings)
            if label is not None:
                cell.label.set(label)
            if self.debug:
                _logger.info("Entry updated: id=%s fields=%s", entry_id, changed)
        return True

    def list_entries(self) -> list[MacroEntry]:
        """Return snapshots of all entries in insertion order."""
        return [self._cells[entry_id].snapshot() for entry_id in self._order.peek()]

    def get_entry(self, entry_id: UUID) -> MacroEntry:
        return self._cell(entry_id).snapshot()

    def get_derived(self, entry_id: UUID) -> DerivedValues:
        """Return derived values for one entry."""
        return self._cell(entry_id).derived.get()

    def get_aggregate(self) -> MacroAmounts:
        """Return the field-wise sum of all entries."""
        return self._aggregate.get()

    def get_aggregate_derived(self) -> DerivedValues:
        """Return derived values for the aggregate of all entries."""
        return self._aggregate_derived.get()

    @property
    def recipe_name(self) -> str:
        return self._recipe_name.peek()

    def set_recipe_name(self, name: str) -> None:
        self._recipe_name.set(name.strip())
        self._emit(StoreChange(kind=ChangeKind.RENAMED))

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a listener called after every mutation.

        Returns a callable that unregisters the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def watch_totals(
        self, callback: Callable[[DerivedValues], None]
    ) -> Callable[[], None]:
        """Call back with aggregate values now and after every edit affecting them.

        Returns a callable that stops the watch.
        """
        effect = self.graph.effect(
            lambda: callback(self._aggregate_derived.get()), name="watch_totals"
        )
        return effect.dispose

    def _cell(self, entry_id: UUID) -> _EntryCell:
        cell = self._cells.get(entry_id)
        if cell is None:
            raise EntryNotFoundError(entry_id)
        return cell

    @contextmanager
    def _committing(self, change: StoreChange) -> Iterator[None]:
        """Apply a mutation in one batch and always notify listeners.

        Listeners are notified even when an effect run by the batch fails.
        """
        try:
            with self.graph.batch():
                yield
        finally:
            self._emit(change)

    def _emit(self, change: StoreChange) -> None:
        for listener in list(self._listeners):
            listener(change)
