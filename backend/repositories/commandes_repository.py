from typing import Any, Dict, Optional

from supabase import Client

LINES_TABLE = "commande_magasin_produits"
LINE_KEY = ("commande_id", "magasin_id", "produit_id")


def find_line(
    client: Client,
    commande_id: str,
    magasin_id: str,
    produit_id: str,
) -> Optional[Dict[str, Any]]:
    response = (
        client.table(LINES_TABLE)
        .select("*")
        .eq("commande_id", commande_id)
        .eq("magasin_id", magasin_id)
        .eq("produit_id", produit_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def update_quantity(client: Client, line_id: Any, quantite: int) -> Dict[str, Any]:
    response = (
        client.table(LINES_TABLE)
        .update({"quantite": quantite})
        .eq("id", line_id)
        .execute()
    )
    if not response.data:
        raise RuntimeError(f"Order line {line_id} vanished during update")
    return response.data[0]


def insert_line(client: Client, record: Dict[str, Any]) -> Dict[str, Any]:
    response = client.table(LINES_TABLE).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store order line")
    return response.data[0]


def upsert_line(client: Client, record: Dict[str, Any]) -> Dict[str, Any]:
    response = (
        client.table(LINES_TABLE)
        .upsert(record, on_conflict=",".join(LINE_KEY))
        .execute()
    )
    data = response.data or []
    return data[0] if data else record
