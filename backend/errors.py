from typing import Any, Dict, Optional

from fastapi import status


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Erreur serveur interne"

    def __init__(self, message: Optional[str] = None, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Champs obligatoires manquants"


class InvalidQuantity(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "La quantité doit être supérieure à 0"


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid auth token"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Accès refusé"


class UpstreamAuthError(ApiError):
    default_message = "Erreur lors de la création Auth"


class UpstreamDbError(ApiError):
    default_message = "Erreur base de données"


class UpstreamEmailError(ApiError):
    default_message = "Failed to send email"


class ConfigError(ApiError):
    default_message = "Configuration manquante"


class UnknownError(ApiError):
    default_message = "Erreur serveur interne"


def provider_message(exc: BaseException) -> str:
    """Best human-readable message carried by a provider SDK exception."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__
