"""
Authentication router - registration, login and token refresh.
"""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response, status

from tasktrack.api.deps import get_auth_service, get_requester, get_user_service
from tasktrack.api.schemas import LoginIn, RefreshIn, RegisterIn, UserOut, envelope
from tasktrack.config import SETTINGS
from tasktrack.domain.entities import Requester
from tasktrack.services.auth_service import AuthService, LoginResult
from tasktrack.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])

REFRESH_COOKIE = "refreshToken"


def _token_response(response: Response, result: LoginResult) -> dict:
    response.set_cookie(
        REFRESH_COOKIE,
        result.tokens.refresh_token,
        httponly=True,
        secure=SETTINGS.app_env == "production",
        samesite="strict",
        max_age=SETTINGS.refresh_token_ttl_days * 24 * 60 * 60,
    )
    return envelope(
        user=UserOut.model_validate(result.user).dump(),
        accessToken=result.tokens.access_token,
        refreshToken=result.tokens.refresh_token,
        tokenType=result.tokens.token_type,
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, service: UserService = Depends(get_user_service)):
    user = service.register(body.to_command())
    return envelope(message="User registered successfully", user=UserOut.model_validate(user).dump())


@router.post("/login")
def login(body: LoginIn, response: Response, auth: AuthService = Depends(get_auth_service)):
    return _token_response(response, auth.login(body.email, body.password))


@router.post("/refresh")
def refresh(
    response: Response,
    body: Optional[RefreshIn] = None,
    cookie_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    auth: AuthService = Depends(get_auth_service),
):
    token = cookie_token or (body.refresh_token if body else None)
    return _token_response(response, auth.refresh(token))


@router.post("/logout")
def logout(response: Response):
    # Tokens are stateless; dropping the cookie is all the server does.
    response.delete_cookie(REFRESH_COOKIE)
    return envelope(message="Logout successful")


@router.get("/me")
def me(
    requester: Requester = Depends(get_requester),
    service: UserService = Depends(get_user_service),
):
    user = service.get_user(requester.user_id)
    return envelope(user=UserOut.model_validate(user).dump())
