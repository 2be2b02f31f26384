import asyncio
import logging
from typing import Any, Dict

from supabase import Client

from errors import InvalidQuantity, InvalidRequest, UpstreamDbError, provider_message
from repositories.commandes_repository import (
    find_line,
    insert_line,
    update_quantity,
    upsert_line,
)
from schemas import UpdateQuantityRequest
from supabase_client import AdminClientFactory, PROVIDER_ERRORS

logger = logging.getLogger("phenix-commandes")

DB_ERRORS = PROVIDER_ERRORS + (RuntimeError,)


def validate_request(payload: UpdateQuantityRequest) -> None:
    if (
        not payload.commande_id
        or not payload.magasin_id
        or not payload.produit_id
        or payload.quantite is None
    ):
        raise InvalidRequest("Champs obligatoires manquants")
    if payload.quantite < 1:
        raise InvalidQuantity("La quantité doit être supérieure à 0")


def _line_record(payload: UpdateQuantityRequest) -> Dict[str, Any]:
    return {
        "commande_id": payload.commande_id,
        "magasin_id": payload.magasin_id,
        "produit_id": payload.produit_id,
        "quantite": payload.quantite,
    }


async def _check_then_write(client: Client, payload: UpdateQuantityRequest) -> Dict[str, Any]:
    # Not atomic: two concurrent first reports for one triple can both insert.
    try:
        existing = await asyncio.to_thread(
            find_line,
            client,
            payload.commande_id,
            payload.magasin_id,
            payload.produit_id,
        )
    except DB_ERRORS as exc:
        logger.error("Error looking up order line: %s", exc)
        raise UpstreamDbError(
            "Erreur lors de la lecture", details=provider_message(exc)
        ) from exc

    if existing:
        try:
            return await asyncio.to_thread(
                update_quantity, client, existing["id"], payload.quantite
            )
        except DB_ERRORS as exc:
            logger.error("Error updating quantity: %s", exc)
            raise UpstreamDbError(
                "Erreur lors de la mise à jour", details=provider_message(exc)
            ) from exc

    record = _line_record(payload)
    try:
        return await asyncio.to_thread(insert_line, client, record)
    except DB_ERRORS as exc:
        logger.error("Error inserting quantity: %s", exc)
        raise UpstreamDbError(
            "Erreur lors de l'insertion", details=provider_message(exc)
        ) from exc


async def _atomic_upsert(client: Client, payload: UpdateQuantityRequest) -> Dict[str, Any]:
    record = _line_record(payload)
    try:
        return await asyncio.to_thread(upsert_line, client, record)
    except DB_ERRORS as exc:
        logger.error("Error upserting quantity: %s", exc)
        raise UpstreamDbError(
            "Erreur lors de la mise à jour", details=provider_message(exc)
        ) from exc


async def update_line_quantity(
    client_factory: AdminClientFactory,
    payload: UpdateQuantityRequest,
    *,
    atomic: bool = False,
) -> Dict[str, Any]:
    """Set the quantity of one (commande, magasin, produit) line, creating it if needed.

    ``atomic`` relies on a unique constraint over the triple in the database.
    """
    logger.info(
        "Received update request: commande=%s magasin=%s produit=%s quantite=%s",
        payload.commande_id,
        payload.magasin_id,
        payload.produit_id,
        payload.quantite,
    )
    validate_request(payload)
    client = client_factory()
    if atomic:
        return await _atomic_upsert(client, payload)
    return await _check_then_write(client, payload)
