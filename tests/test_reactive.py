"""Tests for reactive primitives."""

import pytest

from pe_calculator.services.reactive import Computed, ReactiveGraph


def test_computed_is_lazy_and_cached() -> None:
    graph = ReactiveGraph()
    source = graph.signal(2)
    doubled = graph.computed(lambda: source.get() * 2)

    assert doubled.recompute_count == 0
    assert doubled.get() == 4
    assert doubled.get() == 4
    assert doubled.recompute_count == 1


def test_signal_change_marks_dependents_dirty() -> None:
    graph = ReactiveGraph()
    source = graph.signal(1)
    plus_one = graph.computed(lambda: source.get() + 1)
    chained = graph.computed(lambda: plus_one.get() * 10)
    assert chained.get() == 20

    source.set(5)

    assert plus_one.dirty
    assert chained.dirty
    assert chained.get() == 60
    assert plus_one.recompute_count == 2
    assert chained.recompute_count == 2


def test_unrelated_signal_does_not_invalidate() -> None:
    graph = ReactiveGraph()
    first = graph.signal(1)
    second = graph.signal(1)
    reads_first = graph.computed(lambda: first.get())
    reads_first.get()

    second.set(2)

    assert not reads_first.dirty
    assert reads_first.recompute_count == 1


def test_setting_equal_value_is_ignored() -> None:
    graph = ReactiveGraph()
    source = graph.signal(3.0)
    derived = graph.computed(lambda: source.get())
    derived.get()

    source.set(3.0)

    assert not derived.dirty


def test_dependencies_are_retracked_on_each_run() -> None:
    graph = ReactiveGraph()
    use_left = graph.signal(True)
    left = graph.signal("left")
    right = graph.signal("right")
    picked = graph.computed(lambda: left.get() if use_left.get() else right.get())
    assert picked.get() == "left"

    use_left.set(False)
    assert picked.get() == "right"
    left.set("changed")

    assert not picked.dirty
    assert picked.get() == "right"


def test_peek_does_not_track() -> None:
    graph = ReactiveGraph()
    source = graph.signal(1)
    peeked = graph.computed(lambda: source.peek())
    peeked.get()

    source.set(2)

    assert not peeked.dirty
    assert peeked.get() == 1


def test_effect_runs_immediately_and_after_changes() -> None:
    graph = ReactiveGraph()
    source = graph.signal(1)
    seen: list[int] = []
    effect = graph.effect(lambda: seen.append(source.get()))

    source.set(2)
    source.set(3)

    assert seen == [1, 2, 3]
    assert effect.run_count == 3


def test_batch_defers_effects_until_exit() -> None:
    graph = ReactiveGraph()
    first = graph.signal(1)
    second = graph.signal(1)
    seen: list[int] = []
    graph.effect(lambda: seen.append(first.get() + second.get()))

    with graph.batch():
        first.set(10)
        second.set(20)
        assert seen == [2]

    assert seen == [2, 30]


def test_disposed_effect_stops_running() -> None:
    graph = ReactiveGraph()
    source = graph.signal(1)
    seen: list[int] = []
    effect = graph.effect(lambda: seen.append(source.get()))

    effect.dispose()
    source.set(2)

    assert seen == [1]


def test_disposed_computed_cannot_be_read() -> None:
    graph = ReactiveGraph()
    source = graph.signal(1)
    derived = graph.computed(lambda: source.get(), name="derived")
    derived.dispose()

    with pytest.raises(RuntimeError):
        derived.get()


def test_self_dependency_is_reported() -> None:
    graph = ReactiveGraph()
    holder: dict[str, Computed[int]] = {}
    looped = graph.computed(lambda: holder["node"].get(), name="looped")
    holder["node"] = looped

    with pytest.raises(RuntimeError, match="cycle"):
        looped.get()


def test_effect_feedback_loop_is_bounded() -> None:
    graph = ReactiveGraph()
    counter = graph.signal(0)
    trigger = graph.signal(0)

    def bump() -> None:
        trigger.get()
        counter.set(counter.peek() + 1)
        trigger.set(trigger.peek() + 1)

    with pytest.raises(RuntimeError, match="did not settle"):
        graph.effect(bump)
        trigger.set(100)


def test_failing_effect_does_not_skip_other_effects() -> None:
    graph = ReactiveGraph()
    source = graph.signal(1)
    seen: list[int] = []

    def fail_on_change() -> None:
        if source.get() > 1:
            raise ValueError("effect failed")

    graph.effect(fail_on_change, name="failing")
    graph.effect(lambda: seen.append(source.get()), name="healthy")

    with pytest.raises(ValueError, match="effect failed"):
        source.set(2)
    with pytest.raises(ValueError, match="effect failed"):
        source.set(3)

    assert seen == [1, 2, 3]
