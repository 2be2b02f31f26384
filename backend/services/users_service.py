"""
Store-user provisioning.

An account lives in two places: the Supabase Auth identity and our own
``users`` profile row, which must share the identity's id. Creation is a
two-step saga with one compensating action:

1. create the identity (email confirmed, metadata carries prenom/nom/role);
2. insert the profile row keyed by the identity id.

If step 2 fails the identity is deleted again. The rollback is best effort:
when the delete itself fails we only log it, so an identity without profile
can survive a provider outage. Nothing here is idempotent; two identical
concurrent requests are arbitrated by the auth provider's unique email.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from supabase import Client

from errors import InvalidRequest, UpstreamAuthError, UpstreamDbError, provider_message
from repositories.users_repository import create_identity, delete_identity, insert_profile
from schemas import CreatedUser, CreateStoreUserRequest
from supabase_client import AdminClientFactory, PROVIDER_ERRORS

logger = logging.getLogger("phenix-commandes")

REQUIRED_FIELDS = ("email", "password", "role")
OPTIONAL_PROFILE_FIELDS = ("magasin_id", "prenom", "nom", "telephone", "perimetre")
ROLES = ("admin", "la_redoute", "magasin")


def validate_request(payload: CreateStoreUserRequest) -> None:
    missing = [name for name in REQUIRED_FIELDS if not getattr(payload, name)]
    if missing:
        raise InvalidRequest(
            "Champs obligatoires manquants: " + ", ".join(REQUIRED_FIELDS),
            details={"missing": missing},
        )
    if payload.role not in ROLES:
        raise InvalidRequest("Rôle invalide", details={"role": payload.role})


def build_profile_record(user_id: str, payload: CreateStoreUserRequest) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "id": user_id,
        "email": payload.email,
        "role": payload.role,
    }
    for name in OPTIONAL_PROFILE_FIELDS:
        record[name] = getattr(payload, name) or None
    return record


class ProvisioningSaga:
    def __init__(self, client: Client) -> None:
        self._client = client
        self.identity_id: Optional[str] = None

    async def create_identity(self, payload: CreateStoreUserRequest) -> str:
        metadata = {"prenom": payload.prenom, "nom": payload.nom, "role": payload.role}
        try:
            self.identity_id = await asyncio.to_thread(
                create_identity,
                self._client,
                email=payload.email,
                password=payload.password,
                metadata=metadata,
            )
        except PROVIDER_ERRORS as exc:
            logger.error("Auth admin error for %s: %s", payload.email, exc)
            raise UpstreamAuthError(
                "Erreur lors de la création Auth", details=provider_message(exc)
            ) from exc
        return self.identity_id

    async def insert_profile(self, payload: CreateStoreUserRequest) -> Dict[str, Any]:
        record = build_profile_record(self.identity_id, payload)
        try:
            return await asyncio.to_thread(insert_profile, self._client, record)
        except PROVIDER_ERRORS as exc:
            logger.error("DB users insert error for %s: %s", self.identity_id, exc)
            await self.compensate()
            raise UpstreamDbError(
                "Erreur lors de la création du profil DB", details=provider_message(exc)
            ) from exc
        except Exception:
            await self.compensate()
            raise

    async def compensate(self) -> None:
        if not self.identity_id:
            return
        try:
            await asyncio.to_thread(delete_identity, self._client, self.identity_id)
            logger.info("Rolled back auth identity %s", self.identity_id)
        except Exception as exc:  # rollback failures are never surfaced
            logger.warning(
                "Could not delete orphaned auth identity %s: %s", self.identity_id, exc
            )


async def create_store_user(
    client_factory: AdminClientFactory,
    payload: CreateStoreUserRequest,
) -> CreatedUser:
    validate_request(payload)
    saga = ProvisioningSaga(client_factory())
    user_id = await saga.create_identity(payload)
    await saga.insert_profile(payload)
    logger.info("Provisioned %s user %s", payload.role, user_id)
    return CreatedUser(id=user_id, email=payload.email, role=payload.role)
