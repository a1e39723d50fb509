from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shegoes.api.deps import current_user_id, get_user_service
from shegoes.api.presenters import session_payload, state_payload
from shegoes.features.users.service import UserService
from shegoes.models.identity import Identity
from shegoes.models.user_state import EnergyLevel, Theme

router = APIRouter(prefix="/v1/users", tags=["users"])


class PreferencesIn(BaseModel):
    theme: Optional[Theme] = None
    preferred_energy: Optional[EnergyLevel] = None


class ProfileIn(BaseModel):
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


class StreakProtectionIn(BaseModel):
    enabled: bool


@router.post("/session")
def open_session(identity: Identity, users: UserService = Depends(get_user_service)):
    """Hand-off from an external identity provider: load or create the user's state."""
    return session_payload(users.sign_in(identity))


@router.get("/me")
def get_me(user_id: str = Depends(current_user_id), users: UserService = Depends(get_user_service)):
    return {"data": state_payload(users.get_state(user_id))}


@router.patch("/me/preferences")
def update_preferences(
    body: PreferencesIn,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    state = users.update_preferences(user_id, theme=body.theme, preferred_energy=body.preferred_energy)
    return {"data": state_payload(state)}


@router.patch("/me/profile")
def update_profile(
    body: ProfileIn,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    state = users.update_profile(user_id, display_name=body.display_name, photo_url=body.photo_url)
    return {"data": state_payload(state)}


@router.post("/me/premium")
def upgrade(user_id: str = Depends(current_user_id), users: UserService = Depends(get_user_service)):
    return {"data": state_payload(users.upgrade_to_premium(user_id))}


@router.put("/me/streak-protection")
def set_streak_protection(
    body: StreakProtectionIn,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    return {"data": state_payload(users.set_streak_protection(user_id, body.enabled))}


@router.post("/me/reconcile")
def reconcile(user_id: str = Depends(current_user_id), users: UserService = Depends(get_user_service)):
    report = users.reconcile(user_id)
    return {
        "data": {
            "state": state_payload(report.state),
            "inSync": report.in_sync,
            "divergedFields": report.diverged_fields,
        }
    }


@router.post("/me/sign-out")
def sign_out(user_id: str = Depends(current_user_id), users: UserService = Depends(get_user_service)):
    users.sign_out(user_id)
    return {"data": {"signedOut": True}}
