from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from shegoes.api.deps import current_user_id, get_user_service, resolve_today
from shegoes.api.presenters import completion_payload
from shegoes.core.clock import utc_now
from shegoes.core.errors import ValidationError
from shegoes.features.users.service import UserService
from shegoes.models.user_state import EnergyLevel

router = APIRouter(prefix="/v1/ritual", tags=["ritual"])


class ActionIn(BaseModel):
    energy: Optional[EnergyLevel] = None


class CompleteIn(BaseModel):
    action: Optional[str] = Field(default=None, max_length=500)
    energy: Optional[EnergyLevel] = None
    today: Optional[date] = None  # the device's local calendar date


@router.get("/today")
def today_status(
    today: Optional[date] = None,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    return {"data": users.day_status(user_id, resolve_today(today))}


@router.post("/action")
def fetch_action(
    body: ActionIn,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    action = users.fetch_action(user_id, body.energy)
    return {"data": action.model_dump(by_alias=True)}


@router.post("/complete")
def complete(
    body: CompleteIn,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    outcome = users.complete_today(
        user_id,
        today=resolve_today(body.today),
        now=utc_now(),
        action_text=body.action,
        energy=body.energy,
    )
    if outcome.result.transition == "no_active_dream":
        raise ValidationError("Pick a dream before completing today's action")
    return completion_payload(outcome)
