from .admin import router as admin_router
from .commandes import router as commandes_router
from .emails import router as emails_router
from .meta import router as meta_router
from .session import router as session_router

__all__ = [
    "admin_router",
    "commandes_router",
    "emails_router",
    "meta_router",
    "session_router",
]
