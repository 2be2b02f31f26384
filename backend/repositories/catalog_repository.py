from typing import Any, Dict, List, Optional

from supabase import Client

MODELES_TABLE = "modeles"
PRODUITS_TABLE = "produits"


def find_modele_id(client: Client, nom: str) -> Optional[str]:
    response = (
        client.table(MODELES_TABLE)
        .select("id")
        .eq("nom", nom)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0]["id"] if items else None


def insert_modele(client: Client, nom: str) -> Optional[str]:
    response = client.table(MODELES_TABLE).insert({"nom": nom}).execute()
    items = response.data or []
    return items[0]["id"] if items else None


def upsert_produit(
    client: Client,
    record: Dict[str, Any],
    *,
    on_conflict: str,
) -> Optional[str]:
    response = (
        client.table(PRODUITS_TABLE)
        .upsert(record, on_conflict=on_conflict)
        .execute()
    )
    items = response.data or []
    return items[0]["id"] if items else None


def archive_missing(client: Client, categorie: str, kept_ids: List[str]) -> int:
    response = (
        client.table(PRODUITS_TABLE)
        .update({"actif": False})
        .eq("categorie", categorie)
        .not_.in_("id", kept_ids)
        .execute()
    )
    return len(response.data or [])
