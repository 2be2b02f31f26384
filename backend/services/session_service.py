"""
Role-based landing redirection.

After sign-in every user goes through the same one-shot decision: look at
the session, read the profile, send the browser to the area of its role.
Any failure along the way ends on the login page; nothing is retried and no
error is shown to the end user.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import Depends

from auth import Session, sign_in
from config import Settings, get_settings
from errors import Forbidden, InvalidRequest, UpstreamAuthError, UpstreamDbError, provider_message
from repositories.users_repository import fetch_profile
from schemas import LoginResponse
from supabase_client import PROVIDER_ERRORS, get_user_client

logger = logging.getLogger("phenix-commandes")

LOGIN_PATH = "/login"
ROLE_TARGETS = {
    "admin": "/admin",
    "la_redoute": "/client",
    "magasin": "/magasin",
}

ProfileLoader = Callable[[Session], Awaitable[Optional[Dict[str, Any]]]]


class PageState(str, enum.Enum):
    LOADING = "loading"
    REDIRECTING = "redirecting"
    ERROR = "error"


@dataclass(frozen=True)
class RedirectDecision:
    state: PageState
    target: str
    role: Optional[str] = None


def target_for_role(role: Optional[str]) -> str:
    return ROLE_TARGETS.get(role or "", LOGIN_PATH)


async def load_profile(settings: Settings, session: Session) -> Optional[Dict[str, Any]]:
    client = get_user_client(settings, session.access_token)
    return await asyncio.to_thread(fetch_profile, client, session.user_id)


def get_profile_loader(settings: Settings = Depends(get_settings)) -> ProfileLoader:
    async def _loader(session: Session) -> Optional[Dict[str, Any]]:
        return await load_profile(settings, session)

    return _loader


async def resolve_redirect(
    session: Optional[Session],
    loader: ProfileLoader,
) -> RedirectDecision:
    if session is None:
        logger.info("No session, redirecting to %s", LOGIN_PATH)
        return RedirectDecision(PageState.REDIRECTING, LOGIN_PATH)

    try:
        profile = await loader(session)
    except Exception as exc:  # any failure collapses to the login page
        logger.warning("Error loading profile for %s: %s", session.user_id, exc)
        return RedirectDecision(PageState.ERROR, LOGIN_PATH)

    if not profile:
        logger.warning("No profile row for %s", session.user_id)
        return RedirectDecision(PageState.ERROR, LOGIN_PATH)

    role = profile.get("role")
    target = target_for_role(role)
    if target == LOGIN_PATH:
        logger.warning("Unknown role %r for %s", role, session.user_id)
    return RedirectDecision(PageState.REDIRECTING, target, role)


async def login(
    settings: Settings,
    email: Optional[str],
    password: Optional[str],
    loader: ProfileLoader,
) -> LoginResponse:
    if not email or not password:
        raise InvalidRequest("Champs obligatoires manquants: email, password")
    tokens = await sign_in(settings, email, password)
    user = tokens.get("user") or {}
    if not user.get("id") or not tokens.get("access_token"):
        raise UpstreamAuthError("Erreur de connexion", details="User not found")

    session = Session(
        user_id=user["id"],
        email=user.get("email"),
        access_token=tokens["access_token"],
    )
    try:
        profile = await loader(session)
    except PROVIDER_ERRORS as exc:
        raise UpstreamDbError("Erreur de connexion", details=provider_message(exc)) from exc

    role = (profile or {}).get("role")
    if role not in ROLE_TARGETS:
        raise Forbidden("Rôle invalide")
    return LoginResponse(
        access_token=session.access_token,
        refresh_token=tokens.get("refresh_token"),
        role=role,
        redirect=ROLE_TARGETS[role],
    )
