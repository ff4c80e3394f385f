"""
In-memory stand-in for the supabase-py client used by the API tests.

Covers the query-builder calls the services make: select/insert/update/
upsert/delete with eq, neq, in_, is_, order, limit and offset, plus rpc()
and the auth calls behind token checks and user deletion.
"""

import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.mode = "select"
        self.columns: Optional[List[str]] = None
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.filters: List[Callable[[dict], bool]] = []
        self.ordering: List[tuple] = []
        self._limit: Optional[int] = None
        self._offset = 0

    def select(self, columns: str = "*"):
        self.mode = "select"
        if columns.strip() != "*":
            self.columns = [c.strip() for c in columns.split(",") if c.strip()]
        return self

    def insert(self, data):
        self.mode = "insert"
        self.payload = data
        return self

    def update(self, data: dict):
        self.mode = "update"
        self.payload = data
        return self

    def upsert(self, data, on_conflict: str = "id"):
        self.mode = "upsert"
        self.payload = data
        self.on_conflict = on_conflict
        return self

    def delete(self):
        self.mode = "delete"
        return self

    def eq(self, column: str, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column: str, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column: str, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def is_(self, column: str, value):
        if value in ("null", None):
            self.filters.append(lambda row: row.get(column) is None)
        else:
            self.filters.append(lambda row: row.get(column) == value)
        return self

    def order(self, column: str, desc: bool = False):
        self.ordering.append((column, desc))
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def offset(self, count: int):
        self._offset = count
        return self

    def _matches(self, row: dict) -> bool:
        return all(check(row) for check in self.filters)

    def _project(self, row: dict) -> dict:
        if self.columns is None:
            return copy.deepcopy(row)
        return {c: copy.deepcopy(row.get(c)) for c in self.columns}

    def _sorted(self, rows: List[dict]) -> List[dict]:
        for column, desc in reversed(self.ordering):
            rows = sorted(
                rows,
                key=lambda row: (row.get(column) is not None, row.get(column) if row.get(column) is not None else 0),
                reverse=desc,
            )
        return rows

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table, self.mode))
        for hook in self.db.before_execute:
            hook(self)
        failure = self.db.failures.get((self.table, self.mode))
        if failure is not None:
            raise failure

        rows = self.db.tables.setdefault(self.table, [])

        if self.mode == "select":
            found = self._sorted([row for row in rows if self._matches(row)])
            end = None if self._limit is None else self._offset + self._limit
            return FakeResponse([self._project(row) for row in found[self._offset:end]])

        if self.mode == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = [self.db.add_row(self.table, item) for item in items]
            return FakeResponse(created)

        if self.mode == "update":
            changed = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self.payload))
                    changed.append(copy.deepcopy(row))
            return FakeResponse(changed)

        if self.mode == "upsert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            keys = [k.strip() for k in self.on_conflict.split(",")]
            written = []
            for item in items:
                existing = next((row for row in rows if all(row.get(k) == item.get(k) for k in keys)), None)
                if existing is None:
                    written.append(self.db.add_row(self.table, item))
                else:
                    existing.update(copy.deepcopy(item))
                    written.append(copy.deepcopy(existing))
            return FakeResponse(written)

        if self.mode == "delete":
            kept, removed = [], []
            for row in rows:
                (removed if self._matches(row) else kept).append(row)
            self.db.tables[self.table] = kept
            return FakeResponse(copy.deepcopy(removed))

        raise ValueError(f"Unsupported mode {self.mode}")


class FakeRpc:
    def __init__(self, handler: Callable[[dict], Any], params: dict):
        self.handler = handler
        self.params = params

    def execute(self) -> FakeResponse:
        return FakeResponse(self.handler(self.params))


class FakeAuthAdmin:
    def __init__(self, db: "FakeSupabase"):
        self.db = db
        self.deleted: List[str] = []
        self.fail_with: Optional[Exception] = None

    def delete_user(self, user_id: str):
        if self.fail_with is not None:
            raise self.fail_with
        self.deleted.append(user_id)
        self.db.tables["profiles"] = [p for p in self.db.tables.get("profiles", []) if p["id"] != user_id]
        return SimpleNamespace(user=None)


class FakeAuth:
    def __init__(self, db: "FakeSupabase"):
        self.tokens: Dict[str, SimpleNamespace] = {}
        self.passwords: Dict[str, str] = {}
        self.admin = FakeAuthAdmin(db)

    def add_token(self, token: str, user_id: str, email: str) -> None:
        self.tokens[token] = SimpleNamespace(id=user_id, email=email, user_metadata={}, app_metadata={})

    def get_user(self, jwt: str = None):
        user = self.tokens.get(jwt)
        if user is None:
            raise Exception("invalid JWT: token is unknown")
        return SimpleNamespace(user=user)

    def sign_up(self, credentials: dict):
        email = credentials["email"]
        if any(u.email == email for u in self.tokens.values()):
            raise Exception("User already registered")
        user = SimpleNamespace(id=str(uuid.uuid4()), email=email,
                               user_metadata=credentials.get("options", {}).get("data", {}), app_metadata={})
        self.tokens[f"token-{user.id}"] = user
        self.passwords[email] = credentials["password"]
        return SimpleNamespace(user=user, session=None)

    def sign_in_with_password(self, credentials: dict):
        if self.passwords.get(credentials["email"]) != credentials["password"]:
            raise Exception("Invalid login credentials")
        token, user = next((t, u) for t, u in self.tokens.items() if u.email == credentials["email"])
        session = SimpleNamespace(access_token=token, refresh_token="refresh-" + token, expires_in=3600)
        return SimpleNamespace(user=user, session=session)

    def sign_out(self):
        return None


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.rpc_handlers: Dict[str, Callable[[dict], Any]] = {}
        self.failures: Dict[tuple, Exception] = {}
        self.calls: List[tuple] = []
        self.before_execute: List[Callable[["FakeQuery"], None]] = []
        self.auth = FakeAuth(self)
        self._tick = 0

    def next_timestamp(self) -> str:
        self._tick += 1
        return (_EPOCH + timedelta(seconds=self._tick)).isoformat()

    def add_row(self, table: str, row: dict) -> dict:
        stored = copy.deepcopy(row)
        stored.setdefault("id", str(uuid.uuid4()))
        now = self.next_timestamp()
        stored.setdefault("created_at", now)
        stored.setdefault("updated_at", now)
        self.tables.setdefault(table, []).append(stored)
        return copy.deepcopy(stored)

    def rows(self, table: str, **match) -> List[dict]:
        return [
            copy.deepcopy(row) for row in self.tables.get(table, [])
            if all(row.get(k) == v for k, v in match.items())
        ]

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict) -> FakeRpc:
        if name not in self.rpc_handlers:
            raise Exception(f"function {name} does not exist")
        return FakeRpc(self.rpc_handlers[name], params)
