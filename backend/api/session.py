from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from auth import Session, get_current_session, get_optional_session, sign_out
from config import Settings, get_settings
from errors import UpstreamDbError, provider_message
from schemas import LoginRequest, LoginResponse, RedirectResponseBody, UserProfile
from services.session_service import (
    ProfileLoader,
    get_profile_loader,
    login,
    resolve_redirect,
)
from supabase_client import PROVIDER_ERRORS

router = APIRouter(tags=["session"])


@router.post("/api/auth/login", response_model=LoginResponse)
async def post_login(
    payload: LoginRequest,
    settings: Settings = Depends(get_settings),
    loader: ProfileLoader = Depends(get_profile_loader),
) -> LoginResponse:
    return await login(settings, payload.email, payload.password, loader)


@router.post("/api/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
async def post_logout(
    session: Session = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
) -> Response:
    await sign_out(settings, session.access_token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/api/me", response_model=UserProfile)
async def read_me(
    session: Session = Depends(get_current_session),
    loader: ProfileLoader = Depends(get_profile_loader),
) -> UserProfile:
    try:
        profile = await loader(session)
    except PROVIDER_ERRORS as exc:
        raise UpstreamDbError("Profil introuvable", details=provider_message(exc)) from exc
    if not profile:
        raise UpstreamDbError("Profil introuvable")
    try:
        return UserProfile(**profile)
    except ValidationError as exc:
        details = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
            for error in exc.errors()
        ]
        raise UpstreamDbError("Profil invalide", details=details) from exc


@router.get("/api/session/redirect", response_model=RedirectResponseBody)
async def read_redirect(
    session: Session | None = Depends(get_optional_session),
    loader: ProfileLoader = Depends(get_profile_loader),
) -> RedirectResponseBody:
    decision = await resolve_redirect(session, loader)
    return RedirectResponseBody(
        state=decision.state.value, target=decision.target, role=decision.role
    )


@router.get("/dashboard")
async def dashboard(
    session: Session | None = Depends(get_optional_session),
    loader: ProfileLoader = Depends(get_profile_loader),
) -> RedirectResponse:
    decision = await resolve_redirect(session, loader)
    return RedirectResponse(decision.target, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
