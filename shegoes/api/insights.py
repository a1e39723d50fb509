from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from shegoes.api.deps import current_user_id, get_user_service, resolve_today
from shegoes.features.insights.service import build_progress_recap, build_share_card, dream_drops
from shegoes.features.users.service import UserService

router = APIRouter(prefix="/v1/insights", tags=["insights"])


@router.get("/recap")
def recap(
    today: Optional[date] = None,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    return {"data": build_progress_recap(users.get_state(user_id), resolve_today(today))}


@router.get("/share-card")
def share_card(
    win_id: Optional[str] = None,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    state = users.get_state(user_id)
    return {"data": build_share_card(state, win_id, users.identity_label(user_id))}


@router.get("/dream-drops")
def get_dream_drops(
    today: Optional[date] = None,
    user_id: str = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    return {"data": dream_drops(users.get_state(user_id), resolve_today(today))}
