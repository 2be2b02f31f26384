from fastapi import APIRouter, Depends, File, Form, UploadFile

from schemas import (
    CatalogImportResponse,
    CreateStoreUserRequest,
    CreateStoreUserResponse,
)
from services.catalog_service import DEFAULT_CATEGORY, import_catalog
from services.users_service import create_store_user
from supabase_client import AdminClientFactory, get_admin_client_factory

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/create-store-user", response_model=CreateStoreUserResponse)
async def create_user(
    payload: CreateStoreUserRequest,
    client_factory: AdminClientFactory = Depends(get_admin_client_factory),
) -> CreateStoreUserResponse:
    user = await create_store_user(client_factory, payload)
    return CreateStoreUserResponse(user=user)


@router.post("/catalog/import", response_model=CatalogImportResponse)
async def import_catalog_file(
    file: UploadFile | None = File(default=None),
    category: str = Form(default=DEFAULT_CATEGORY),
    archive_missing: str = Form(default="false", alias="archiveMissing"),
    client_factory: AdminClientFactory = Depends(get_admin_client_factory),
) -> CatalogImportResponse:
    content = await file.read() if file is not None else None
    summary = await import_catalog(
        client_factory,
        content,
        category=category,
        archive_missing_products=archive_missing == "true",
    )
    return CatalogImportResponse(summary=summary)
