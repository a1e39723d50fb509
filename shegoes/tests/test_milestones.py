from datetime import date, timedelta

from shegoes.core.ids import SequenceIdSource
from shegoes.features.streaks.engine import record_completion
from shegoes.features.streaks.milestones import MILESTONES, detect_milestone, next_milestone
from shegoes.tests.factories import at, make_state, make_wins


def test_milestone_fires_exactly_once_across_consecutive_days():
    ids = SequenceIdSource("win")
    state = make_state()
    day = date(2024, 3, 1)
    signals = []

    for _ in range(10):
        result = record_completion(state, day, "Tiny step", now=at(day), id_source=ids)
        signals.append(result.milestone_triggered)
        state = result.state
        day += timedelta(days=1)

    assert signals[2] == 3
    assert signals[6] == 7
    assert [s for i, s in enumerate(signals) if i not in (2, 6)] == [None] * 8
    assert state.milestones_reached.count(3) == 1
    assert state.milestones_reached == [3, 7]


def test_milestone_already_reached_does_not_fire_again():
    state = make_state(wins=make_wins(2), milestones_reached=[3])

    result = record_completion(state, date(2024, 1, 5), "Step", now=at(date(2024, 1, 5)), id_source=SequenceIdSource())

    assert result.milestone_triggered is None
    assert "milestones_reached" not in result.changes
    assert result.state.milestones_reached == [3]


def test_milestone_emits_event():
    state = make_state(wins=make_wins(2))

    result = record_completion(state, date(2024, 1, 5), "Step", now=at(date(2024, 1, 5)), id_source=SequenceIdSource())

    assert {"type": "milestone.reached", "payload": {"userId": "user-1", "milestone": 3}} in result.emitted


def test_skipped_threshold_never_fires():
    # A count that jumps from 2 straight to 4 passes 3 without matching it.
    assert detect_milestone(4, [], MILESTONES) is None
    assert detect_milestone(3, [], MILESTONES) == 3


def test_custom_thresholds():
    assert detect_milestone(14, [], (3, 7, 14, 30, 90, 365)) == 14
    assert detect_milestone(15, [], (3, 7, 14, 30, 90, 365)) is None


def test_next_milestone():
    assert next_milestone(0) == (3, 3)
    assert next_milestone(3) == (7, 4)
    assert next_milestone(99) == (100, 1)
    assert next_milestone(100) is None
