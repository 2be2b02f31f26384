from functools import lru_cache
from typing import Callable

import httpx
from fastapi import Depends
from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client
from supabase_auth.errors import AuthError

from config import Settings, get_settings


@lru_cache(maxsize=4)
def _admin_client(url: str, service_role_key: str) -> Client:
    return create_client(
        url,
        service_role_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


def get_admin_client(settings: Settings) -> Client:
    """Client on the elevated credential path (auth admin, unrestricted tables)."""
    return _admin_client(
        settings.require("supabase_url"),
        settings.require("supabase_service_role_key"),
    )


AdminClientFactory = Callable[[], Client]


def get_admin_client_factory(settings: Settings = Depends(get_settings)) -> AdminClientFactory:
    """Builds the admin client on first call, after the request body was validated."""
    return lambda: get_admin_client(settings)


def get_user_client(settings: Settings, access_token: str) -> Client:
    """Client on the restricted credential path, acting as the token's user."""
    client = create_client(
        settings.require("supabase_url"),
        settings.require("supabase_anon_key"),
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
    client.postgrest.auth(access_token)
    return client


# Failures raised by the Supabase SDK on the way to or from the provider.
PROVIDER_ERRORS = (APIError, AuthError, httpx.HTTPError)


def get_optional_admin_client(settings: Settings = Depends(get_settings)) -> Client | None:
    if not (settings.supabase_url and settings.supabase_service_role_key):
        return None
    return _admin_client(settings.supabase_url, settings.supabase_service_role_key)
