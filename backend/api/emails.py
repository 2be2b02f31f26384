from fastapi import APIRouter, Depends
from supabase import Client

from schemas import SendEmailRequest, SendEmailResponse
from services.email_service import EmailSender, get_email_sender, send_email
from supabase_client import get_optional_admin_client

router = APIRouter(prefix="/api", tags=["emails"])


@router.post("/send-email", response_model=SendEmailResponse)
async def post_email(
    payload: SendEmailRequest,
    sender: EmailSender = Depends(get_email_sender),
    client: Client | None = Depends(get_optional_admin_client),
) -> SendEmailResponse:
    data = await send_email(sender, payload, client=client)
    return SendEmailResponse(data=data)
