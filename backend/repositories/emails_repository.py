from typing import Any, Dict

from supabase import Client

SENT_EMAILS_TABLE = "emails_sent"


def record_sent_email(client: Client, record: Dict[str, Any]) -> None:
    client.table(SENT_EMAILS_TABLE).insert(record).execute()
