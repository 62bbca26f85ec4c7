"""Supabase repository for food log entries."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from nutrition_log.domain.food_logs import (
    FoodLogChanges,
    FoodLogEntry,
    FoodLogQuery,
    NewFoodLog,
)
from nutrition_log.domain.nutrition import MealType
from nutrition_log.errors import StorageError
from nutrition_log.services.food_logs import FoodLogRepository

_TABLE = "food_logs"
_COLUMNS = (
    "id, user_id, meal_id, meal_type, quantity, log_date, logged_at, notes, "
    "created_at, updated_at"
)


@dataclass
class SupabaseFoodLogRepository(FoodLogRepository):
    """Supabase implementation for food log entries.

    Uniqueness of (user_id, meal_id, log_date, meal_type) is enforced by a
    table constraint; single-item logging goes through the ``upsert_food_log``
    database function so the insert-or-update is one statement.
    """

    client: Client

    def get_entry(self, entry_id: UUID) -> FoodLogEntry | None:
        """Return an entry by id, if present."""
        response = _execute(
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("id", str(entry_id))
            .limit(1),
            "fetch food log",
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def find_entry(
        self,
        user_id: UUID,
        meal_id: UUID,
        log_date: datetime,
        meal_type: MealType | None,
    ) -> FoodLogEntry | None:
        """Return the entry for a tuple; meal type is skipped when None."""
        query = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("meal_id", str(meal_id))
            .eq("log_date", log_date.isoformat())
        )
        if meal_type is not None:
            query = query.eq("meal_type", meal_type.value)
        response = _execute(query.limit(1), "look up food log")
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def find_entries_for_meals(
        self,
        user_id: UUID,
        meal_type: MealType,
        log_date: datetime,
        meal_ids: list[UUID],
    ) -> list[FoodLogEntry]:
        """Return existing entries for any of the meals in one query."""
        response = _execute(
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("meal_type", meal_type.value)
            .eq("log_date", log_date.isoformat())
            .in_("meal_id", [str(meal_id) for meal_id in meal_ids]),
            "look up food logs",
        )
        return [_parse_entry(row) for row in response.data or []]

    def upsert_entry(self, entry: NewFoodLog) -> tuple[FoodLogEntry, bool]:
        """Insert the entry or replace quantity and notes of its twin."""
        response = _execute(
            self.client.rpc("upsert_food_log", _rpc_params(entry)),
            "upsert food log",
        )
        rows = response.data
        if isinstance(rows, dict):
            rows = [rows]
        if not rows:
            raise StorageError("Failed to upsert food log")
        row = rows[0]
        return _parse_entry(row), bool(row.get("inserted"))

    def create_entries(self, entries: list[NewFoodLog]) -> list[FoodLogEntry]:
        """Insert entries in one batch and return them."""
        if not entries:
            return []
        response = _execute(
            self.client.table(_TABLE).insert([_insert_payload(e) for e in entries]),
            "create food logs",
        )
        if not response.data or len(response.data) != len(entries):
            raise StorageError("Failed to create food logs")
        return [_parse_entry(row) for row in response.data]

    def update_entry(
        self, entry_id: UUID, changes: FoodLogChanges
    ) -> FoodLogEntry | None:
        """Apply changes to an entry and return it."""
        response = _execute(
            self.client.table(_TABLE)
            .update(_update_payload(changes))
            .eq("id", str(entry_id)),
            "update food log",
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def delete_entry(self, entry_id: UUID) -> bool:
        """Delete an entry and report whether it existed."""
        response = _execute(
            self.client.table(_TABLE).delete().eq("id", str(entry_id)),
            "delete food log",
        )
        return bool(response.data)

    def list_entries(
        self, query: FoodLogQuery, offset: int, limit: int
    ) -> tuple[list[FoodLogEntry], int]:
        """Return a page of entries, newest log date first, and the total."""
        request = self.client.table(_TABLE).select(_COLUMNS, count="exact")
        if query.user_id is not None:
            request = request.eq("user_id", str(query.user_id))
        if query.meal_type is not None:
            request = request.eq("meal_type", query.meal_type.value)
        if query.start is not None:
            request = request.gte("log_date", query.start.isoformat())
        if query.end is not None:
            request = request.lte("log_date", query.end.isoformat())
        response = _execute(
            request.order("log_date", desc=True).range(offset, offset + limit - 1),
            "list food logs",
        )
        rows = response.data or []
        total = response.count if response.count is not None else len(rows)
        return [_parse_entry(row) for row in rows], total

    def list_entries_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodLogEntry]:
        """Return entries with start <= log_date < end, oldest first."""
        response = _execute(
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("log_date", start.isoformat())
            .lt("log_date", end.isoformat())
            .order("log_date", desc=False),
            "list food logs in range",
        )
        return [_parse_entry(row) for row in response.data or []]

    def list_user_entries(self, user_id: UUID) -> list[FoodLogEntry]:
        """Return every entry for a user."""
        response = _execute(
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("log_date", desc=False),
            "list user food logs",
        )
        return [_parse_entry(row) for row in response.data or []]


def _execute(query: Any, action: str) -> Any:  # noqa: ANN401
    """Run a query, translating client failures into StorageError."""
    try:
        return query.execute()
    except APIError as exc:
        raise StorageError(f"Failed to {action}: {exc.message}") from exc
    except httpx.HTTPError as exc:
        raise StorageError(f"Failed to {action}: {exc}") from exc


def _insert_payload(entry: NewFoodLog) -> dict[str, object]:
    return {
        "user_id": str(entry.user_id),
        "meal_id": str(entry.meal_id),
        "meal_type": entry.meal_type.value,
        "quantity": entry.quantity,
        "log_date": entry.log_date.isoformat(),
        "logged_at": entry.logged_at.isoformat(),
        "notes": entry.notes,
    }


def _rpc_params(entry: NewFoodLog) -> dict[str, object]:
    return {f"p_{key}": value for key, value in _insert_payload(entry).items()}


def _update_payload(changes: FoodLogChanges) -> dict[str, object]:
    payload: dict[str, object] = {}
    if changes.meal_id is not None:
        payload["meal_id"] = str(changes.meal_id)
    if changes.meal_type is not None:
        payload["meal_type"] = changes.meal_type.value
    if changes.quantity is not None:
        payload["quantity"] = changes.quantity
    if changes.log_date is not None:
        payload["log_date"] = changes.log_date.isoformat()
    if changes.logged_at is not None:
        payload["logged_at"] = changes.logged_at.isoformat()
    if changes.notes is not None:
        payload["notes"] = changes.notes
    return payload


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


def _parse_entry(row: dict[str, object]) -> FoodLogEntry:
    """Parse a food log row into a domain model."""
    log_date = _parse_timestamp(row.get("log_date"))
    logged_at = _parse_timestamp(row.get("logged_at"))
    if log_date is None or logged_at is None:
        raise StorageError(f"Food log {row.get('id')} has no log date")
    return FoodLogEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        meal_id=UUID(str(row["meal_id"])),
        meal_type=MealType(str(row["meal_type"])),
        quantity=float(row.get("quantity", 0.0)),
        log_date=log_date,
        logged_at=logged_at,
        notes=row.get("notes"),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )
