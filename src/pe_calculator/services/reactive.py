"""Fine-grained reactive primitives.

Signals hold source values. Computed nodes record which signals and other
computed nodes they read, are marked dirty when any of those change and
recompute lazily on the next read, so a consumer never observes a stale
value. Effects re-run synchronously once the mutation that affected them
has finished.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)

_MAX_FLUSH_PASSES = 100


class _Node:
    def __init__(self, graph: "ReactiveGraph", name: str | None) -> None:
        self.graph = graph
        self.name = name
        self._subscribers: dict[_Observer, None] = {}

    def _track(self) -> None:
        observer = self.graph._current_observer()
        if observer is not None:
            observer._sources[self] = None
            self._subscribers[observer] = None

    def _notify(self) -> None:
        for subscriber in list(self._subscribers):
            subscriber._mark_dirty()


class _Observer:
    _sources: dict[_Node, None]

    def _mark_dirty(self) -> None:
        raise NotImplementedError

    def _clear_sources(self) -> None:
        for source in self._sources:
            source._subscribers.pop(self, None)
        self._sources = {}


class Signal(_Node, Generic[T]):
    """Mutable source value."""

    def __init__(self, graph: "ReactiveGraph", value: T, name: str | None) -> None:
        super().__init__(graph, name)
        self._value = value

    def get(self) -> T:
        """Return the value and register it as a dependency of the caller."""
        self._track()
        return self._value

    def peek(self) -> T:
        """Return the value without registering a dependency."""
        return self._value

    def set(self, value: T) -> None:
        """Replace the value and invalidate everything that read it."""
        if value == self._value:
            return
        self._value = value
        with self.graph.batch():
            self._notify()


class Computed(_Node, _Observer, Generic[T]):
    """Value derived from other nodes, recomputed lazily when dirty."""

    def __init__(
        self, graph: "ReactiveGraph", fn: Callable[[], T], name: str | None
    ) -> None:
        super().__init__(graph, name)
        self._fn = fn
        self._value: T | None = None
        self._sources = {}
        self._dirty = True
        self._computing = False
        self._disposed = False
        self.recompute_count = 0

    @property
    def dirty(self) -> bool:
        return self._dirty

    def get(self) -> T:
        """Return the current value, recomputing first if a source changed."""
        if self._disposed:
            raise RuntimeError(f"Computed {self.name!r} has been disposed")
        if self._dirty:
            self._recompute()
        self._track()
        return self._value  # type: ignore[return-value]

    def dispose(self) -> None:
        """Detach from all sources and subscribers."""
        self._clear_sources()
        self._subscribers.clear()
        self._disposed = True

    def _recompute(self) -> None:
        if self._computing:
            raise RuntimeError(f"Dependency cycle through {self.name!r}")
        self._clear_sources()
        self._computing = True
        try:
            with self.graph._observing(self):
                self._value = self._fn()
        finally:
            self._computing = False
        self._dirty = False
        self.recompute_count += 1

    def _mark_dirty(self) -> None:
        if self._dirty:
            return
        self._dirty = True
        self._notify()


class Effect(_Observer):
    """Callback re-run whenever a node it read changes."""

    def __init__(
        self, graph: "ReactiveGraph", fn: Callable[[], None], name: str | None
    ) -> None:
        self.graph = graph
        self.name = name
        self._fn = fn
        self._sources = {}
        self._disposed = False
        self.run_count = 0
        self._run()

    def dispose(self) -> None:
        """Stop re-running the callback."""
        self._clear_sources()
        self._disposed = True

    def _run(self) -> None:
        if self._disposed:
            return
        self._clear_sources()
        with self.graph._observing(self):
            self._fn()
        self.run_count += 1

    def _mark_dirty(self) -> None:
        if not self._disposed:
            self.graph._schedule(self)


class ReactiveGraph:
    """Owner of a set of reactive nodes and of the pending effect queue."""

    def __init__(self) -> None:
        self._observers: list[_Observer] = []
        self._pending: dict[Effect, None] = {}
        self._batch_depth = 0
        self._flushing = False

    def signal(self, value: T, name: str | None = None) -> Signal[T]:
        return Signal(self, value, name)

    def computed(self, fn: Callable[[], T], name: str | None = None) -> Computed[T]:
        return Computed(self, fn, name)

    def effect(self, fn: Callable[[], None], name: str | None = None) -> Effect:
        """Run fn now and again after every change to what it reads."""
        return Effect(self, fn, name)

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Defer effects until the outermost batch exits."""
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and not self._flushing:
                self._flush()

    def _current_observer(self) -> _Observer | None:
        return self._observers[-1] if self._observers else None

    @contextmanager
    def _observing(self, observer: _Observer) -> Iterator[None]:
        self._observers.append(observer)
        try:
            yield
        finally:
            self._observers.pop()

    def _schedule(self, effect: Effect) -> None:
        self._pending[effect] = None

    def _flush(self) -> None:
        """Run every queued effect, then raise the first failure if any."""
        self._flushing = True
        first_error: Exception | None = None
        try:
            passes = 0
            while self._pending:
                passes += 1
                if passes > _MAX_FLUSH_PASSES:
                    self._pending.clear()
                    raise RuntimeError("Reactive effects did not settle")
                effects = list(self._pending)
                self._pending.clear()
                for effect in effects:
                    try:
                        effect._run()
                    except Exception as exc:
                        _logger.exception(
                            "Reactive effect failed: name=%s", effect.name
                        )
                        if first_error is None:
                            first_error = exc
        finally:
            self._flushing = False
        if first_error is not None:
            raise first_error
