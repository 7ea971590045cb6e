import random

import pytest
from pydantic import ValidationError

from phrase_coach.srs import (
    DAY_MS,
    EASE_MAX,
    EASE_MIN,
    InvalidQualityError,
    MemoryState,
    is_due,
    next_ease,
    review,
)

NOW = 1_700_000_000_000


def _review(state: MemoryState, quality: int, seed: int = 0) -> MemoryState:
    return review(state, quality, now_ms=NOW, rng=random.Random(seed))


def test_initial_state_is_due_immediately():
    state = MemoryState.initial()
    assert (state.ease, state.interval, state.due, state.reps, state.lapses) == (2.5, 0, 0, 0, 0)
    assert is_due(state, now_ms=0)


def test_first_success_schedules_one_day():
    state = _review(MemoryState.initial(), 5)
    assert state.interval == 1
    assert state.reps == 1
    assert state.lapses == 0
    assert state.ease == pytest.approx(2.6)


def test_second_success_schedules_three_days():
    state = _review(_review(MemoryState.initial(), 5), 5)
    assert state.interval == 3
    assert state.reps == 2


def test_third_success_multiplies_interval_by_previous_ease():
    state = MemoryState(ease=2.5, interval=3, reps=2)
    result = _review(state, 5)
    assert result.interval == 8  # round(3 * 2.5) with the ease before its update
    assert result.reps == 3
    assert result.ease == pytest.approx(2.6)


def test_interval_rounds_half_up():
    # built-in round() would turn 32.5 into 32
    result = _review(MemoryState(ease=2.6, interval=2, reps=2), 4)
    assert result.interval == 5  # 2 * 2.6 = 5.2
    result = _review(MemoryState(ease=2.5, interval=13, reps=3), 5)
    assert result.interval == 33  # 32.5 -> 33


@pytest.mark.parametrize("reps", [1, 2, 7])
def test_failure_resets_reps_and_counts_lapse(reps):
    state = MemoryState(ease=2.2, interval=20, reps=reps, lapses=3)
    result = _review(state, 2)
    assert result.reps == 0
    assert result.lapses == 4
    assert result.interval == 1
    assert result.ease == state.ease


def test_failure_on_new_card():
    result = _review(MemoryState.initial(), 0)
    assert (result.reps, result.lapses, result.interval) == (0, 1, 1)


@pytest.mark.parametrize(
    ("quality", "expected"),
    [(5, 2.6), (4, 2.5), (3, 2.36)],
)
def test_ease_update_per_quality(quality, expected):
    assert next_ease(2.5, quality) == pytest.approx(expected)


def test_ease_is_clamped_at_both_ends():
    assert _review(MemoryState(ease=EASE_MAX), 5).ease == EASE_MAX
    assert _review(MemoryState(ease=EASE_MIN, reps=1, interval=1), 3).ease == EASE_MIN


def test_ease_stays_within_bounds_over_random_sequences():
    rng = random.Random(42)
    state = MemoryState.initial()
    for _ in range(500):
        state = review(state, rng.randint(0, 5), now_ms=NOW, rng=rng)
        assert EASE_MIN <= state.ease <= EASE_MAX
        assert state.interval >= 1
        assert state.lapses >= 0 and state.reps >= 0


def test_higher_quality_never_lowers_ease():
    for ease in (1.3, 1.8, 2.5, 2.8):
        eases = [next_ease(ease, q) for q in range(3, 6)]
        assert eases == sorted(eases)


def test_lapses_never_decrease():
    rng = random.Random(7)
    state = MemoryState.initial()
    previous = 0
    for quality in [5, 1, 5, 5, 0, 4, 2, 5]:
        state = review(state, quality, now_ms=NOW, rng=rng)
        assert state.lapses >= previous
        previous = state.lapses


def test_due_is_after_now_for_every_quality():
    for quality in range(6):
        result = _review(MemoryState(ease=2.0, interval=4, reps=3), quality, seed=quality)
        assert result.due > NOW


def test_jitter_ratio_within_bounds():
    rng = random.Random(1234)
    state = MemoryState(ease=2.5, interval=3, reps=1)
    ratios = []
    for _ in range(2000):
        result = review(state, 5, now_ms=NOW, rng=rng)
        ratios.append((result.due - NOW) / (result.interval * DAY_MS))
    assert all(1.05 <= r < 1.15 for r in ratios)
    # 一様分布なら平均はおよそ 1.10 で、両端付近にも値が出る
    assert sum(ratios) / len(ratios) == pytest.approx(1.10, abs=0.005)
    assert min(ratios) < 1.06 and max(ratios) > 1.14


def test_jitter_is_redrawn_per_call():
    rng = random.Random(99)
    state = MemoryState(ease=2.5, interval=3, reps=1)
    dues = {review(state, 5, now_ms=NOW, rng=rng).due for _ in range(20)}
    assert len(dues) > 1


def test_seeded_rng_is_deterministic():
    state = MemoryState(ease=2.5, interval=3, reps=2)
    assert _review(state, 4, seed=5) == _review(state, 4, seed=5)


def test_input_state_is_not_mutated():
    state = MemoryState(ease=2.1, interval=6, due=123, reps=2, lapses=1)
    snapshot = state.model_dump()
    result = _review(state, 5)
    assert state.model_dump() == snapshot
    assert result is not state


def test_memory_state_is_frozen():
    state = MemoryState.initial()
    with pytest.raises(ValidationError):
        state.reps = 3  # type: ignore[misc]


def test_unbounded_interval_growth_is_preserved():
    state = MemoryState(ease=2.8, interval=1000, reps=10)
    assert _review(state, 5).interval == 2800


def test_defaults_to_wall_clock_and_module_rng():
    result = review(MemoryState.initial(), 5)
    assert is_due(result) is False


@pytest.mark.parametrize("quality", [-1, 6, 100])
def test_out_of_range_quality_is_rejected(quality):
    with pytest.raises(InvalidQualityError):
        _review(MemoryState.initial(), quality)


@pytest.mark.parametrize("quality", [4.5, "5", True, None])
def test_non_integer_quality_is_rejected(quality):
    with pytest.raises(InvalidQualityError):
        _review(MemoryState.initial(), quality)  # type: ignore[arg-type]
