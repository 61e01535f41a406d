"""Shared test fixtures.

Sets environment variables BEFORE any app imports so that the auth
dependency and the app module resolve without a real .env file or a
Supabase project. The hosted client is replaced by ``FakeSupabase``, an
in-memory double of the PostgREST query builder subset the services use.
"""

import os

# --- Environment setup (must happen before app imports) -------------------
os.environ.setdefault("AUTH_JWT_SECRET", "test-signing-secret-with-enough-length")
os.environ.setdefault("PUBLIC_SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SECRET_API_KEY", "test-service-key")
os.environ.pop("AUTH_JWT_ISSUER", None)

# --- Now it's safe to import app modules ---------------------------------
import time
import uuid
from collections import defaultdict

import jwt
import pytest
from postgrest.exceptions import APIError
from starlette.testclient import TestClient

from app.core.supabase_client import get_supabase
from app.main import app


UNIQUE_KEYS = {
    "users": [("clerk_id",)],
    "conversation_members": [("conversation_id", "user_id")],
    "direct_conversations": [("conversation_id",), ("user1_id", "user2_id")],
    "reactions": [("message_id", "user_id", "emoji")],
    "unread_counts": [("user_id", "conversation_id")],
    "typing_markers": [("conversation_id", "user_id")],
}

DEFAULTS = {
    "conversations": {"name": None, "created_by": None, "last_message_id": None},
    "messages": {"deleted": False},
}

# conversation deletes cascade to these tables
CASCADES = {
    "conversations": [("conversation_members", "conversation_id"), ("direct_conversations", "conversation_id")],
}


class FakeResponse:
    def __init__(self, data):
        self.data = data
        self.count = len(data)


class FakeQuery:
    def __init__(self, db, table):
        self._db = db
        self._table = table
        self._op = "select"
        self._payload = None
        self._filters = []
        self._order = None
        self._limit = None

    # operations
    def select(self, *columns):
        self._op = "select"
        return self

    def insert(self, payload):
        self._op = "insert"
        self._payload = payload
        return self

    def update(self, values):
        self._op = "update"
        self._payload = values
        return self

    def delete(self):
        self._op = "delete"
        return self

    # filters
    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self._filters.append(lambda row: row.get(column) != value)
        return self

    def gt(self, column, value):
        self._filters.append(
            lambda row: row.get(column) is not None and row.get(column) > value
        )
        return self

    def in_(self, column, values):
        values = list(values)
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def or_(self, expression):
        clauses = []
        for clause in expression.split(","):
            column, operator, value = clause.split(".", 2)
            assert operator == "eq", f"unsupported or_ operator {operator}"
            clauses.append((column, value))

        self._filters.append(
            lambda row: any(str(row.get(c)) == v for c, v in clauses)
        )
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, size):
        self._limit = size
        return self

    def execute(self):
        self._db.calls.append((self._table, self._op))

        failure = (self._table, self._op)
        if failure in self._db.failures:
            self._db.failures.remove(failure)
            raise APIError({"code": "XX000", "message": f"injected {failure}"})

        return FakeResponse(getattr(self, f"_run_{self._op}")())

    def _matching(self):
        return [
            row
            for row in self._db.tables[self._table]
            if all(check(row) for check in self._filters)
        ]

    def _run_select(self):
        rows = self._matching()
        if self._order:
            column, desc = self._order
            rows = sorted(rows, key=lambda row: row.get(column), reverse=desc)
        if self._limit is not None:
            rows = rows[: self._limit]
        return [dict(row) for row in rows]

    def _run_insert(self):
        payload = self._payload if isinstance(self._payload, list) else [self._payload]
        table = self._db.tables[self._table]

        new_rows = []
        for item in payload:
            row = {**DEFAULTS.get(self._table, {}), **item}
            row.setdefault("id", str(uuid.uuid4()))
            for key in UNIQUE_KEYS.get(self._table, []):
                candidates = table + new_rows
                if any(all(o.get(k) == row.get(k) for k in key) for o in candidates):
                    raise APIError(
                        {"code": "23505", "message": f"duplicate key on {self._table}"}
                    )
            new_rows.append(row)

        table.extend(new_rows)
        return [dict(row) for row in new_rows]

    def _run_update(self):
        rows = self._matching()
        for row in rows:
            row.update(self._payload)
        return [dict(row) for row in rows]

    def _run_delete(self):
        rows = self._matching()
        ids = {row["id"] for row in rows}
        self._db.tables[self._table] = [
            row for row in self._db.tables[self._table] if row["id"] not in ids
        ]
        for child, column in CASCADES.get(self._table, []):
            self._db.tables[child] = [
                row for row in self._db.tables[child] if row.get(column) not in ids
            ]
        return [dict(row) for row in rows]


class FakeSupabase:
    def __init__(self):
        self.tables = defaultdict(list)
        self.failures = []
        self.calls = []

    def table(self, name):
        return FakeQuery(self, name)

    def fail_on(self, table, op):
        """Make the next `op` against `table` raise an APIError."""
        self.failures.append((table, op))

    def rows(self, table):
        return [dict(row) for row in self.tables[table]]


def make_token(clerk_id: str, **claims) -> str:
    payload = {"sub": clerk_id, "exp": int(time.time()) + 3600, **claims}
    return jwt.encode(payload, os.environ["AUTH_JWT_SECRET"], algorithm="HS256")


def auth_headers(clerk_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(clerk_id)}"}


@pytest.fixture()
def db():
    return FakeSupabase()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with ``get_supabase`` overridden to use the fake store."""
    app.dependency_overrides[get_supabase] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class ChatUser:
    def __init__(self, user_id, clerk_id, name):
        self.id = user_id
        self.clerk_id = clerk_id
        self.name = name
        self.headers = auth_headers(clerk_id)


@pytest.fixture()
def make_user(client):
    """Sign a user in through /users/sync and return a ChatUser."""

    def _make_user(name: str) -> ChatUser:
        clerk_id = f"user_{uuid.uuid4().hex[:12]}"
        res = client.post(
            "/users/sync",
            json={
                "clerk_id": clerk_id,
                "name": name,
                "email": f"{name.lower()}@example.com",
                "image_url": f"https://img.example.com/{name.lower()}.png",
            },
        )
        assert res.status_code == 200, res.text
        return ChatUser(res.json()["user_id"], clerk_id, name)

    return _make_user


@pytest.fixture()
def alice(make_user):
    return make_user("Alice")


@pytest.fixture()
def bob(make_user):
    return make_user("Bob")


@pytest.fixture()
def carol(make_user):
    return make_user("Carol")


@pytest.fixture()
def dave(make_user):
    return make_user("Dave")


@pytest.fixture()
def eve(make_user):
    return make_user("Eve")


@pytest.fixture()
def open_direct(client):
    def _open_direct(user: ChatUser, other: ChatUser) -> str:
        res = client.post(
            "/conversations", json={"other_user_id": other.id}, headers=user.headers
        )
        assert res.status_code == 200, res.text
        return res.json()["conversation_id"]

    return _open_direct


@pytest.fixture()
def open_group(client):
    def _open_group(creator: ChatUser, others, name="Team") -> str:
        res = client.post(
            "/conversations/group",
            json={"participant_ids": [o.id for o in others], "name": name},
            headers=creator.headers,
        )
        assert res.status_code == 201, res.text
        return res.json()["id"]

    return _open_group


@pytest.fixture()
def send(client):
    def _send(user: ChatUser, conversation_id: str, content="hello") -> str:
        res = client.post(
            "/messages",
            json={"conversation_id": conversation_id, "content": content},
            headers=user.headers,
        )
        assert res.status_code == 201, res.text
        return res.json()["message_id"]

    return _send
