import itertools
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from auth import Session, get_current_session, get_optional_session
from config import Settings, get_settings
from errors import Unauthorized
from main import app
from services.email_service import get_email_sender
from services.session_service import get_profile_loader
from supabase_client import get_admin_client_factory, get_optional_admin_client


def api_error(message: str, code: str = "23505") -> APIError:
    return APIError({"message": message, "code": code, "details": None, "hint": None})


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.filters: List[tuple] = []
        self._negate = False
        self._limit: Optional[int] = None

    def select(self, columns: str = "*") -> "FakeQuery":
        return self

    def insert(self, record: Dict[str, Any]) -> "FakeQuery":
        self.op, self.payload = "insert", dict(record)
        return self

    def update(self, payload: Dict[str, Any]) -> "FakeQuery":
        self.op, self.payload = "update", dict(payload)
        return self

    def upsert(self, record: Dict[str, Any], on_conflict: Optional[str] = None) -> "FakeQuery":
        self.op, self.payload, self.on_conflict = "upsert", dict(record), on_conflict
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, lambda row, v=value, c=column: row.get(c) == v))
        return self

    @property
    def not_(self) -> "FakeQuery":
        self._negate = True
        return self

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        values = list(values)
        if self._negate:
            self._negate = False
            self.filters.append((column, lambda row, c=column: row.get(c) not in values))
        else:
            self.filters.append((column, lambda row, c=column: row.get(c) in values))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(check(row) for _, check in self.filters)

    def execute(self) -> SimpleNamespace:
        self.db.calls.append((self.table_name, self.op))
        failure = self.db.failures.get((self.table_name, self.op))
        if failure is not None:
            raise failure
        rows = self.db.tables.setdefault(self.table_name, [])

        if self.op == "select":
            found = [dict(row) for row in rows if self._matches(row)]
            if self._limit is not None:
                found = found[: self._limit]
            return SimpleNamespace(data=found)

        if self.op == "insert":
            return SimpleNamespace(data=[self.db.add_row(self.table_name, self.payload)])

        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return SimpleNamespace(data=updated)

        keys = (self.on_conflict or "id").split(",")
        for row in rows:
            if all(row.get(key) == self.payload.get(key) for key in keys):
                row.update(self.payload)
                return SimpleNamespace(data=[dict(row)])
        return SimpleNamespace(data=[self.db.add_row(self.table_name, self.payload)])


class FakeAuthAdmin:
    def __init__(self, db: "FakeSupabase") -> None:
        self.db = db

    def create_user(self, attributes: Dict[str, Any]) -> SimpleNamespace:
        self.db.calls.append(("auth", "create_user"))
        if self.db.auth_create_error is not None:
            raise self.db.auth_create_error
        user_id = f"user-{next(self.db.ids)}"
        self.db.identities[user_id] = dict(attributes)
        return SimpleNamespace(user=SimpleNamespace(id=user_id, email=attributes["email"]))

    def delete_user(self, user_id: str) -> None:
        self.db.calls.append(("auth", "delete_user"))
        if self.db.auth_delete_error is not None:
            raise self.db.auth_delete_error
        self.db.identities.pop(user_id, None)


class FakeSupabase:
    """In-memory stand-in for the parts of the Supabase client we call."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.identities: Dict[str, Dict[str, Any]] = {}
        self.failures: Dict[tuple, Exception] = {}
        self.calls: List[tuple] = []
        self.ids = itertools.count(1)
        self.auth_create_error: Optional[Exception] = None
        self.auth_delete_error: Optional[Exception] = None
        self.auth = SimpleNamespace(admin=FakeAuthAdmin(self))

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def add_row(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(record)
        row.setdefault("id", f"{table}-{next(self.ids)}")
        self.tables.setdefault(table, []).append(row)
        return dict(row)

    def fail(self, table: str, op: str, exc: Exception) -> None:
        self.failures[(table, op)] = exc


class FakeSender:
    def __init__(self, api_key: Optional[str] = "re_test", default_from: str = "noreply@phenixlog.com") -> None:
        self.api_key = api_key
        self.default_from = default_from
        self.sent: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def send(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if self.error is not None:
            raise self.error
        self.sent.append(params)
        return {"id": f"email-{len(self.sent)}"}


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        supabase_url="https://project.supabase.co",
        supabase_service_role_key="service-role",
        supabase_anon_key="anon",
        resend_api_key="re_test",
        email_from="noreply@phenixlog.com",
        auth_timeout_seconds=5,
        order_line_atomic_upsert=False,
        log_level="INFO",
        allowed_origins=["*"],
    )


@pytest.fixture
def profiles() -> Dict[str, Dict[str, Any]]:
    return {}


@pytest.fixture
def session_holder() -> Dict[str, Optional[Session]]:
    return {"session": None}


@pytest.fixture
def client(db, sender, test_settings, profiles, session_holder):
    async def _loader(session: Session):
        profile = profiles.get(session.user_id)
        if isinstance(profile, Exception):
            raise profile
        return profile

    async def _optional_session():
        return session_holder["session"]

    async def _current_session():
        if session_holder["session"] is None:
            raise Unauthorized("Missing auth token")
        return session_holder["session"]

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_admin_client_factory] = lambda: (lambda: db)
    app.dependency_overrides[get_optional_admin_client] = lambda: db
    app.dependency_overrides[get_email_sender] = lambda: sender
    app.dependency_overrides[get_profile_loader] = lambda: _loader
    app.dependency_overrides[get_optional_session] = _optional_session
    app.dependency_overrides[get_current_session] = _current_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
