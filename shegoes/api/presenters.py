"""Response shaping shared by the routers."""

from typing import Optional

from shegoes.features.users.service import CompletionOutcome, SessionView
from shegoes.models.user_state import UserState, to_document


def state_payload(state: UserState) -> dict:
    return to_document(state)


def session_payload(view: SessionView) -> dict:
    return {
        "data": {
            "state": state_payload(view.state),
            "created": view.created,
            "identityLabel": view.identity_label,
            "affirmation": view.affirmation,
            "next": "ritual" if view.state.has_onboarded else "onboarding",
        }
    }


def completion_payload(outcome: CompletionOutcome) -> dict:
    result = outcome.result
    win: Optional[dict] = result.win.model_dump(mode="json", by_alias=True) if result.win else None
    return {
        "data": {
            "applied": outcome.applied,
            "transition": result.transition,
            "streak": outcome.state.streak,
            "lastCompletedDate": (
                outcome.state.last_completed_date.isoformat() if outcome.state.last_completed_date else None
            ),
            "win": win,
            "milestoneTriggered": result.milestone_triggered,
            "identityLabel": outcome.identity_label,
            "persisted": outcome.persisted,
            "emitted": result.emitted,
        }
    }
