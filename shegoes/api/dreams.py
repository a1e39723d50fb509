from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from shegoes.api.deps import current_user_id, get_user_service
from shegoes.api.presenters import state_payload
from shegoes.core.clock import utc_now
from shegoes.features.content.catalog import catalog
from shegoes.features.users.service import UserService
from shegoes.models.user_state import Category

router = APIRouter(prefix="/v1/dreams", tags=["dreams"])


class DreamIn(BaseModel):
    category: Category
    title: str = Field(..., min_length=1, max_length=200)
    activate: bool = True


class ActiveDreamIn(BaseModel):
    dream_id: str = Field(..., min_length=1)


@router.get("/catalog")
def get_catalog():
    return {"data": {"categories": catalog()}}


@router.post("/onboarding")
def onboard(
    body: DreamIn,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    state = users.complete_onboarding(user_id, body.category, body.title, now=utc_now())
    return {"data": state_payload(state)}


@router.post("")
def add_dream(
    body: DreamIn,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    state = users.add_dream(user_id, body.category, body.title, now=utc_now(), activate=body.activate)
    return {"data": state_payload(state)}


@router.put("/active")
def set_active(
    body: ActiveDreamIn,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    return {"data": state_payload(users.set_active_dream(user_id, body.dream_id))}
