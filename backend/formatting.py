from datetime import datetime
from typing import Dict
from zoneinfo import ZoneInfo

from schemas import StatusBadge

DISPLAY_TIMEZONE = ZoneInfo("Europe/Paris")

STATUT_LABELS = {
    "en_attente": "En attente",
    "en_preparation": "En préparation",
    "confirmee": "Confirmée",
    "envoyee": "Envoyée",
}

STATUT_VARIANTS = {
    "en_attente": "warning",
    "confirmee": "success",
    "en_preparation": "secondary",
    "envoyee": "purple",
}

STATUT_COLORS = {
    "en_attente": "bg-yellow-100 text-yellow-800",
    "en_preparation": "bg-blue-100 text-blue-800",
    "confirmee": "bg-green-100 text-green-800",
    "envoyee": "bg-purple-100 text-purple-800",
}
DEFAULT_STATUT_COLOR = "bg-gray-100 text-gray-800"
DEFAULT_VARIANT = "default"

ROLE_LABELS = {
    "la_redoute": "La Redoute",
    "magasin": "Magasin",
    "admin": "Admin Phenix Log",
}

MONTHS_FR = (
    "janvier",
    "février",
    "mars",
    "avril",
    "mai",
    "juin",
    "juillet",
    "août",
    "septembre",
    "octobre",
    "novembre",
    "décembre",
)


def format_statut(statut: str) -> str:
    return STATUT_LABELS.get(statut, statut)


def format_role(role: str) -> str:
    return ROLE_LABELS.get(role, role)


def get_statut_color(statut: str) -> str:
    return STATUT_COLORS.get(statut, DEFAULT_STATUT_COLOR)


def status_badge(statut: str) -> StatusBadge:
    return StatusBadge(
        label=format_statut(statut),
        variant=STATUT_VARIANTS.get(statut, DEFAULT_VARIANT),
    )


def all_status_badges() -> Dict[str, StatusBadge]:
    return {code: status_badge(code) for code in STATUT_LABELS}


def format_date(value: str | datetime) -> str:
    """French long date with time, e.g. ``15 janvier 2025 à 14:30``.

    ISO strings (``Z`` suffix included) are accepted. Aware values are shown
    in Paris time; naive values are taken as already local.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone(DISPLAY_TIMEZONE)
    month = MONTHS_FR[value.month - 1]
    return f"{value.day} {month} {value.year} à {value:%H:%M}"
