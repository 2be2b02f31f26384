from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateStoreUserRequest(BaseModel):
    email: Optional[str] = Field(default=None, description="Login email of the new account")
    password: Optional[str] = Field(default=None, description="Initial password")
    role: Optional[str] = Field(default=None, description="admin, la_redoute or magasin")
    magasin_id: Optional[str] = None
    nom: Optional[str] = None
    prenom: Optional[str] = None
    telephone: Optional[str] = None
    perimetre: Optional[str] = None


class CreatedUser(BaseModel):
    id: str
    email: str
    role: str


class CreateStoreUserResponse(BaseModel):
    success: bool = True
    user: CreatedUser


class UpdateQuantityRequest(BaseModel):
    commande_id: Optional[str] = None
    magasin_id: Optional[str] = None
    produit_id: Optional[str] = None
    quantite: Optional[int] = None


class UpdateQuantityResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]


class SendEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: Optional[str | List[str]] = None
    subject: Optional[str] = None
    html: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    commande_id: Optional[str] = Field(
        default=None, description="Order the message is about; recorded in emails_sent"
    )
    sent_by: Optional[str] = None


class SendEmailResponse(BaseModel):
    success: bool = True
    message: str = "Email sent successfully"
    data: Optional[Dict[str, Any]] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    role: str
    redirect: str


class RedirectResponseBody(BaseModel):
    state: str
    target: str
    role: Optional[str] = None


class Magasin(BaseModel):
    id: str
    nom: Optional[str] = None
    code: Optional[str] = None
    ville: Optional[str] = None


class UserProfile(BaseModel):
    id: str
    email: Optional[str] = None
    role: str
    magasin_id: Optional[str] = None
    prenom: Optional[str] = None
    nom: Optional[str] = None
    telephone: Optional[str] = None
    perimetre: Optional[str] = None
    magasins: Optional[Magasin] = None


class StatusBadge(BaseModel):
    label: str
    variant: str


class LabelsResponse(BaseModel):
    statuts: Dict[str, StatusBadge]
    roles: Dict[str, str]


class CatalogImportSummary(BaseModel):
    modeles: int = 0
    produits: int = 0
    archived: int = 0
    erreurs: int = 0


class CatalogImportResponse(BaseModel):
    message: str = "Import terminé"
    summary: CatalogImportSummary
