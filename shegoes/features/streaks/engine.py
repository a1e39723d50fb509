from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

from shegoes.core.ids import IdSource, default_id_source
from shegoes.features.entitlements.policy import streak_grace_days
from shegoes.features.streaks.milestones import MILESTONES, detect_milestone
from shegoes.models.user_state import EnergyLevel, UserState, Win

StreakTransition = Literal["consecutive", "protected", "reset", "already_done", "no_active_dream"]

DEFAULT_ACTION_TEXT = "Showed up today"
IDENTITY_REFRESH_EVERY = 3


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of one completion event. ``changes`` is what the caller persists."""

    state: UserState
    transition: StreakTransition
    changes: Dict[str, Any] = field(default_factory=dict)
    win: Optional[Win] = None
    milestone_triggered: Optional[int] = None
    identity_refresh_due: bool = False
    emitted: List[dict] = field(default_factory=list)

    @property
    def applied(self) -> bool:
        return self.win is not None


def evaluate_day_status(state: UserState, today: date) -> bool:
    """True when a completion was already recorded for ``today``."""
    return state.last_completed_date == today


def next_streak(
    state: UserState,
    today: date,
    grace_threshold: Optional[int] = None,
) -> Tuple[StreakTransition, int]:
    """Streak continuation policy, evaluated in order:

    1. last completion was yesterday -> consecutive, +1
    2. premium with protection on and gap <= grace -> protected, +1
    3. otherwise -> reset to 1
    """
    last = state.last_completed_date
    if last is not None and last == today - timedelta(days=1):
        return "consecutive", state.streak + 1

    grace = streak_grace_days(state, grace_threshold)
    if grace > 0 and last is not None:
        gap_days = (today - last).days
        if gap_days <= grace:
            return "protected", state.streak + 1

    return "reset", 1


def record_completion(
    state: UserState,
    today: date,
    action_text: Optional[str],
    *,
    now: datetime,
    id_source: IdSource = default_id_source,
    energy_level: Optional[EnergyLevel] = None,
    reflection: Optional[str] = None,
    thresholds: Sequence[int] = MILESTONES,
    grace_threshold: Optional[int] = None,
) -> CompletionResult:
    """Apply a completion for ``today`` to ``state`` without any I/O.

    Returns the previous state untouched (no win) when today is already done or
    when there is no active dream.
    """
    if evaluate_day_status(state, today):
        return CompletionResult(state=state, transition="already_done")

    if state.active_dream is None:
        return CompletionResult(state=state, transition="no_active_dream")

    text = (action_text or "").strip() or DEFAULT_ACTION_TEXT
    win = Win(
        id=id_source.new_id(),
        dream_id=state.active_dream_id,
        action=text,
        timestamp=now,
        reflection=reflection,
        energy_level=energy_level,
    )

    transition, streak = next_streak(state, today, grace_threshold)
    wins = [win, *state.wins]
    changes: Dict[str, Any] = {
        "wins": wins,
        "streak": streak,
        "last_completed_date": today,
    }

    emitted: List[dict] = [
        {
            "type": "streak.incremented" if transition != "reset" else "streak.reset",
            "payload": {
                "userId": state.uid,
                "streakDay": today.isoformat(),
                "streak": streak,
                "protectionUsed": transition == "protected",
            },
        }
    ]

    milestone = detect_milestone(len(wins), state.milestones_reached, thresholds)
    if milestone is not None:
        changes["milestones_reached"] = [*state.milestones_reached, milestone]
        emitted.append(
            {
                "type": "milestone.reached",
                "payload": {"userId": state.uid, "milestone": milestone},
            }
        )

    identity_refresh_due = bool(state.wins) and len(wins) % IDENTITY_REFRESH_EVERY == 0

    return CompletionResult(
        state=state.model_copy(update=changes),
        transition=transition,
        changes=changes,
        win=win,
        milestone_triggered=milestone,
        identity_refresh_due=identity_refresh_due,
        emitted=emitted,
    )
