import asyncio
import logging
from typing import Any, Dict, List, Optional

import resend
from fastapi import Depends
from resend.exceptions import ResendError
from supabase import Client

from config import Settings, get_settings
from errors import ConfigError, InvalidRequest, UpstreamEmailError, provider_message
from repositories.emails_repository import record_sent_email
from schemas import SendEmailRequest
from supabase_client import PROVIDER_ERRORS

logger = logging.getLogger("phenix-commandes")


class EmailSender:
    """Thin wrapper over the Resend SDK bound to one API key."""

    def __init__(self, api_key: Optional[str], default_from: str) -> None:
        self.api_key = api_key
        self.default_from = default_from

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def send(self, params: Dict[str, Any]) -> Dict[str, Any]:
        resend.api_key = self.api_key
        response = resend.Emails.send(params)
        return dict(response) if response else {}


def get_email_sender(settings: Settings = Depends(get_settings)) -> EmailSender:
    return EmailSender(settings.resend_api_key, settings.email_from)


def _recipients(to: str | List[str]) -> List[str]:
    if isinstance(to, str):
        return [to]
    return [item for item in to if item]


def validate_request(payload: SendEmailRequest) -> None:
    if not payload.to or not payload.subject or not payload.html:
        raise InvalidRequest("Missing required fields: to, subject, html")


async def _record(client: Client, payload: SendEmailRequest, recipients: List[str]) -> None:
    record = {
        "commande_id": payload.commande_id,
        "subject": payload.subject,
        "body": payload.html,
        "sent_by": payload.sent_by,
        "relance": False,
        "email_type": "initial",
        "statut_reponse": "en_attente",
        "destinataire_email": ", ".join(recipients),
    }
    try:
        await asyncio.to_thread(record_sent_email, client, record)
    except PROVIDER_ERRORS as exc:
        # The message is already out; losing the log row must not fail the request.
        logger.error("Database error (email was sent) for commande %s: %s", payload.commande_id, exc)


async def send_email(
    sender: EmailSender,
    payload: SendEmailRequest,
    *,
    client: Optional[Client] = None,
) -> Dict[str, Any]:
    validate_request(payload)
    recipients = _recipients(payload.to)
    if not recipients:
        raise InvalidRequest("Missing required fields: to, subject, html")
    if not sender.configured:
        raise ConfigError("RESEND_API_KEY not configured")

    params = {
        "from": payload.from_ or sender.default_from,
        "to": recipients,
        "subject": payload.subject,
        "html": payload.html,
    }
    try:
        data = await asyncio.to_thread(sender.send, params)
    except ResendError as exc:
        logger.error("Resend error: %s", exc)
        raise UpstreamEmailError("Failed to send email", details=provider_message(exc)) from exc

    logger.info("Email %s sent to %s", data.get("id"), ", ".join(recipients))
    if payload.commande_id and client is not None:
        await _record(client, payload, recipients)
    return data
