from fastapi import APIRouter, Depends

from config import Settings, get_settings
from schemas import UpdateQuantityRequest, UpdateQuantityResponse
from services.commandes_service import update_line_quantity
from supabase_client import AdminClientFactory, get_admin_client_factory

router = APIRouter(prefix="/api/commandes", tags=["commandes"])


@router.post("/update-quantity", response_model=UpdateQuantityResponse)
async def update_quantity(
    payload: UpdateQuantityRequest,
    client_factory: AdminClientFactory = Depends(get_admin_client_factory),
    settings: Settings = Depends(get_settings),
) -> UpdateQuantityResponse:
    row = await update_line_quantity(
        client_factory, payload, atomic=settings.order_line_atomic_upsert
    )
    return UpdateQuantityResponse(data=row)
