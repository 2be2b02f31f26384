import logging
from dataclasses import dataclass
from typing import Any, Dict

import httpx
from fastapi import Depends, Header

from config import Settings, get_settings
from errors import ApiError, Unauthorized, UpstreamAuthError

logger = logging.getLogger("phenix-commandes")


@dataclass(frozen=True)
class Session:
    user_id: str
    email: str | None
    access_token: str


def _auth_headers(settings: Settings, access_token: str | None = None) -> Dict[str, str]:
    headers = {"apikey": settings.require("supabase_anon_key")}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


async def fetch_user(settings: Settings, access_token: str) -> dict:
    url = f"{settings.require('supabase_url')}/auth/v1/user"
    async with httpx.AsyncClient(timeout=settings.auth_timeout_seconds) as client:
        response = await client.get(url, headers=_auth_headers(settings, access_token))
    if response.status_code != 200:
        raise Unauthorized("Invalid auth token")
    return response.json()


async def sign_in(settings: Settings, email: str, password: str) -> Dict[str, Any]:
    url = f"{settings.require('supabase_url')}/auth/v1/token"
    async with httpx.AsyncClient(timeout=settings.auth_timeout_seconds) as client:
        response = await client.post(
            url,
            params={"grant_type": "password"},
            headers=_auth_headers(settings),
            json={"email": email, "password": password},
        )
    if response.status_code != 200:
        message = _error_message(response)
        logger.warning("Sign-in refused for %s: %s", email, message)
        raise UpstreamAuthError("Erreur de connexion", details=message)
    return response.json()


async def sign_out(settings: Settings, access_token: str) -> None:
    url = f"{settings.require('supabase_url')}/auth/v1/logout"
    async with httpx.AsyncClient(timeout=settings.auth_timeout_seconds) as client:
        response = await client.post(url, headers=_auth_headers(settings, access_token))
    if response.status_code not in (200, 204):
        raise UpstreamAuthError("Erreur lors de la déconnexion", details=_error_message(response))


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


async def _session_from_token(settings: Settings, token: str) -> Session:
    user = await fetch_user(settings, token)
    user_id = user.get("id")
    if not user_id:
        raise Unauthorized("Invalid user profile")
    return Session(user_id=user_id, email=user.get("email"), access_token=token)


async def get_current_session(
    authorization: str | None = Header(default=None, convert_underscores=False),
    settings: Settings = Depends(get_settings),
) -> Session:
    token = _bearer_token(authorization)
    if not token:
        raise Unauthorized("Missing auth token")
    return await _session_from_token(settings, token)


async def get_optional_session(
    authorization: str | None = Header(default=None, convert_underscores=False),
    settings: Settings = Depends(get_settings),
) -> Session | None:
    token = _bearer_token(authorization)
    if not token:
        return None
    try:
        return await _session_from_token(settings, token)
    except (ApiError, httpx.HTTPError) as exc:
        logger.info("Ignoring unusable session token: %s", exc)
        return None
