import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import (
    admin_router,
    commandes_router,
    emails_router,
    meta_router,
    session_router,
)
from config import settings
from errors import ApiError, InvalidRequest, UnknownError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("phenix-commandes")

app = FastAPI(title="Phenix Commandes API")

if settings.allowed_origins == ["*"]:
    allow_origins = ["*"]
else:
    allow_origins = settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admin_router)
app.include_router(commandes_router)
app.include_router(emails_router)
app.include_router(session_router)
app.include_router(meta_router)


@app.exception_handler(ApiError)
async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(exc.to_body(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    error = InvalidRequest("Requête invalide", details=details)
    return JSONResponse(error.to_body(), status_code=error.status_code)


@app.on_event("startup")
async def _on_startup() -> None:
    if allow_origins == ["*"]:
        logger.warning(
            "CORS is set to allow all origins with credentials; set ALLOWED_ORIGINS to explicit values for local dev."
        )
    for name in ("supabase_url", "supabase_service_role_key", "supabase_anon_key", "resend_api_key"):
        if not getattr(settings, name):
            logger.warning("%s is not configured; handlers that need it will answer 500", name)


@app.middleware("http")
async def catch_unhandled(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = UnknownError()
        return JSONResponse(error.to_body(), status_code=error.status_code)


@app.middleware("http")
async def log_preflight(request: Request, call_next):
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "")
        logger.info("CORS preflight %s %s origin=%s", request.method, request.url.path, origin)
    response = await call_next(request)
    return response


@app.get("/api/health")
async def health():
    return {"status": "ok"}
