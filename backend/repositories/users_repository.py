from typing import Any, Dict, Optional

from supabase import Client

TABLE_NAME = "users"
PROFILE_WITH_STORE = "*, magasins(*)"


def create_identity(
    client: Client,
    *,
    email: str,
    password: str,
    metadata: Dict[str, Any],
) -> str:
    response = client.auth.admin.create_user(
        {
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": metadata,
        }
    )
    return str(response.user.id)


def delete_identity(client: Client, user_id: str) -> None:
    client.auth.admin.delete_user(user_id)


def insert_profile(client: Client, record: Dict[str, Any]) -> Dict[str, Any]:
    response = client.table(TABLE_NAME).insert(record).execute()
    data = response.data or []
    return data[0] if data else record


def fetch_profile(client: Client, user_id: str) -> Optional[Dict[str, Any]]:
    response = (
        client.table(TABLE_NAME)
        .select(PROFILE_WITH_STORE)
        .eq("id", user_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None
