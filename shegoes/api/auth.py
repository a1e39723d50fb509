from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from shegoes.api.deps import get_auth_service, get_user_service
from shegoes.api.presenters import session_payload
from shegoes.features.auth.service import AuthService
from shegoes.features.users.service import UserService

router = APIRouter(prefix="/v1/auth", tags=["auth"])


class SignUpIn(BaseModel):
    email: str = Field(..., min_length=3)
    password: str
    display_name: Optional[str] = None


class SignInIn(BaseModel):
    email: str = Field(..., min_length=3)
    password: str


@router.post("/sign-up")
def sign_up(
    body: SignUpIn,
    auth: AuthService = Depends(get_auth_service),
    users: UserService = Depends(get_user_service),
):
    identity = auth.sign_up(body.email, body.password, body.display_name)
    return session_payload(users.sign_in(identity))


@router.post("/sign-in")
def sign_in(
    body: SignInIn,
    auth: AuthService = Depends(get_auth_service),
    users: UserService = Depends(get_user_service),
):
    identity = auth.sign_in(body.email, body.password)
    return session_payload(users.sign_in(identity))


@router.post("/guest")
def guest(
    auth: AuthService = Depends(get_auth_service),
    users: UserService = Depends(get_user_service),
):
    identity = auth.sign_in_as_guest()
    return session_payload(users.sign_in(identity))
