from fastapi import APIRouter, Depends, Response

from ..auth import (
    AUTH_COOKIE,
    create_access_token,
    create_state_token,
    get_current_principal,
    get_settings,
    verify_state_token,
)
from ..config import Settings
from ..deps import Services, get_services
from ..guard import Principal
from ..schemas import RedirectOut, TokenOut

router = APIRouter(prefix="/user", tags=["users"])
oauth_router = APIRouter(prefix="/oauth", tags=["oauth"])


@router.get("/me", response_model=dict)
def me(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": services.users.me(principal)}


@oauth_router.get("/google/redirect-uri", response_model=dict)
def google_redirect_uri(
    settings: Settings = Depends(get_settings),
    services: Services = Depends(get_services),
):
    url = services.google.redirect_url(create_state_token(settings))
    return {"data": RedirectOut(redirect_url=url)}


@oauth_router.get("/google/callback", response_model=dict)
def google_callback(
    code: str,
    state: str,
    response: Response,
    settings: Settings = Depends(get_settings),
    services: Services = Depends(get_services),
):
    verify_state_token(settings, state)
    profile = services.google.exchange(code)
    user = services.users.sign_in_google(profile)
    token = create_access_token(settings, user.id)
    response.set_cookie(
        key=AUTH_COOKIE,
        value=token,
        max_age=settings.jwt_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.environment == "prod",
    )
    return {"data": TokenOut(token=token, user=user)}
