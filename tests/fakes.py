"""In-memory stand-ins for the Supabase client used across tests."""

import uuid
from datetime import datetime, timezone
from typing import Any

CUSTOMER_ID = "11111111-1111-4111-8111-111111111111"
RESTAURANT_ID = "22222222-2222-4222-8222-222222222222"
PARTNER_ID = "33333333-3333-4333-8333-333333333333"
OTHER_PARTNER_ID = "44444444-4444-4444-8444-444444444444"
ORDER_ID = "55555555-5555-4555-8555-555555555555"
DISH_ID = "66666666-6666-4666-8666-666666666666"


class FakeResponse:
    """Stand-in for postgrest's APIResponse."""

    def __init__(self, data: Any) -> None:
        self.data = data


class FakeQuery:
    """Chainable query over one FakeSupabase table.

    Supports the filters the services use and applies update/delete only to
    rows matching every filter, like PostgREST does.
    """

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table_name = table
        self.filters: list = []
        self.operation = "select"
        self.payload: Any = None
        self.on_conflict: str | None = None
        self.single = False
        self.order_by: list[tuple[str, bool]] = []
        self.negate_next = False

    def select(self, *_: Any) -> "FakeQuery":
        self.operation = "select"
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self.operation, self.payload = "insert", payload
        return self

    def upsert(self, payload: Any, on_conflict: str = "id") -> "FakeQuery":
        self.operation, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def update(self, payload: dict) -> "FakeQuery":
        self.operation, self.payload = "update", payload
        return self

    def delete(self) -> "FakeQuery":
        self.operation = "delete"
        return self

    @property
    def not_(self) -> "FakeQuery":
        self.negate_next = True
        return self

    def _add_filter(self, check: Any) -> "FakeQuery":
        if self.negate_next:
            self.negate_next = False
            self.filters.append(lambda row: not check(row))
        else:
            self.filters.append(check)
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self._add_filter(lambda row: row.get(column) == value)

    def is_(self, column: str, value: str) -> "FakeQuery":
        assert value == "null"
        return self._add_filter(lambda row: row.get(column) is None)

    def in_(self, column: str, values: list) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by.append((column, desc))
        return self

    def limit(self, _: int) -> "FakeQuery":
        return self

    def maybe_single(self) -> "FakeQuery":
        self.single = True
        return self

    def _matches(self) -> list[dict]:
        return [row for row in self.db.tables[self.table_name] if all(f(row) for f in self.filters)]

    def execute(self) -> FakeResponse | None:
        rows = self.db.tables[self.table_name]
        now = datetime.now(timezone.utc).isoformat()

        if self.operation in ("insert", "upsert"):
            if self.table_name in self.db.failing_inserts:
                raise RuntimeError(f"insert into {self.table_name} failed")
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            stored = []
            for item in payload:
                keys = (self.on_conflict or "").split(",") if self.operation == "upsert" else []
                existing = next(
                    (row for row in rows if keys and all(row.get(k) == item.get(k) for k in keys)),
                    None,
                )
                if existing is not None:
                    existing.update(item)
                    stored.append(dict(existing))
                    continue
                row = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now, **item}
                rows.append(row)
                stored.append(dict(row))
            return FakeResponse(stored)

        matched = self._matches()
        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])
        if self.operation == "delete":
            for row in matched:
                rows.remove(row)
            return FakeResponse([dict(row) for row in matched])

        for column, desc in reversed(self.order_by):
            matched = sorted(matched, key=lambda row: str(row.get(column) or ""), reverse=desc)
        result = [dict(row) for row in matched]
        if self.single:
            return FakeResponse(result[0]) if result else None
        return FakeResponse(result)


class FakeSupabase:
    """Minimal in-memory Supabase client for service-level tests."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {
            "orders": [],
            "order_items": [],
            "order_status_history": [],
            "profiles": [],
            "dishes": [],
            "dish_ratings": [],
            "delivery_locations": [],
        }
        self.failing_inserts: set[str] = set()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


def auth_headers(user_id: str) -> dict[str, str]:
    """Bearer header understood by the api_client fixture."""
    return {"Authorization": f"Bearer {user_id}"}
