"""Shared test fixtures."""

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

import pytest

from nutrition_log.config import Settings
from nutrition_log.containers import AppContainer
from nutrition_log.domain.food_logs import (
    FoodLogChanges,
    FoodLogEntry,
    FoodLogQuery,
    NewFoodLog,
)
from nutrition_log.domain.nutrition import MealFacts, MealType
from nutrition_log.errors import StorageError
from nutrition_log.services.bulk import BulkLogProcessor
from nutrition_log.services.catalog import MealCatalog
from nutrition_log.services.food_logs import FoodLogRepository, FoodLogService
from nutrition_log.services.nutrition import NutritionService
from nutrition_log.services.trends import TrendService

NOW = datetime(2024, 3, 15, 12, 30, tzinfo=UTC)
TODAY = datetime(2024, 3, 15, tzinfo=UTC)

OATMEAL = MealFacts(
    id=UUID("00000000-0000-0000-0000-000000000001"),
    name="Oatmeal",
    calories=100.0,
    protein_g=4.0,
    fat_g=2.0,
    carbs_g=18.0,
    serving_size="1 bowl",
    emoji="🥣",
)
BANANA = MealFacts(
    id=UUID("00000000-0000-0000-0000-000000000002"),
    name="Banana",
    calories=50.0,
    protein_g=1.0,
    fat_g=0.5,
    carbs_g=12.0,
)
SALAD = MealFacts(
    id=UUID("00000000-0000-0000-0000-000000000003"),
    name="Salad",
    calories=80.0,
    protein_g=3.0,
    fat_g=None,
    carbs_g=10.0,
)


def fixed_clock() -> datetime:
    return NOW


@dataclass
class InMemoryFoodLogRepository(FoodLogRepository):
    """In-memory food log repository for tests."""

    entries: dict[UUID, FoodLogEntry] = field(default_factory=dict)
    failing_updates: set[UUID] = field(default_factory=set)
    created_batches: list[list[NewFoodLog]] = field(default_factory=list)
    lookups: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock)

    def add(self, entry: NewFoodLog) -> FoodLogEntry:
        stored = FoodLogEntry(
            id=uuid4(),
            user_id=entry.user_id,
            meal_id=entry.meal_id,
            meal_type=entry.meal_type,
            quantity=entry.quantity,
            log_date=entry.log_date,
            logged_at=entry.logged_at,
            notes=entry.notes,
            created_at=NOW,
            updated_at=NOW,
        )
        self.entries[stored.id] = stored
        return stored

    def get_entry(self, entry_id: UUID) -> FoodLogEntry | None:
        return self.entries.get(entry_id)

    def find_entry(
        self,
        user_id: UUID,
        meal_id: UUID,
        log_date: datetime,
        meal_type: MealType | None,
    ) -> FoodLogEntry | None:
        for entry in self.entries.values():
            if (
                entry.user_id == user_id
                and entry.meal_id == meal_id
                and entry.log_date == log_date
                and (meal_type is None or entry.meal_type == meal_type)
            ):
                return entry
        return None

    def find_entries_for_meals(
        self,
        user_id: UUID,
        meal_type: MealType,
        log_date: datetime,
        meal_ids: list[UUID],
    ) -> list[FoodLogEntry]:
        self.lookups += 1
        return [
            entry
            for entry in self.entries.values()
            if entry.user_id == user_id
            and entry.meal_type == meal_type
            and entry.log_date == log_date
            and entry.meal_id in meal_ids
        ]

    def upsert_entry(self, entry: NewFoodLog) -> tuple[FoodLogEntry, bool]:
        with self.lock:
            twin = self.find_entry(
                entry.user_id, entry.meal_id, entry.log_date, entry.meal_type
            )
            if twin is None:
                return self.add(entry), True
            merged = replace(
                twin,
                quantity=entry.quantity,
                notes=entry.notes if entry.notes is not None else twin.notes,
            )
            self.entries[twin.id] = merged
            return merged, False

    def create_entries(self, entries: list[NewFoodLog]) -> list[FoodLogEntry]:
        self.created_batches.append(list(entries))
        with self.lock:
            return [self.add(entry) for entry in entries]

    def update_entry(
        self, entry_id: UUID, changes: FoodLogChanges
    ) -> FoodLogEntry | None:
        if entry_id in self.failing_updates:
            raise StorageError("connection reset")
        current = self.entries.get(entry_id)
        if current is None:
            return None
        values = {
            name: value
            for name, value in (
                ("meal_id", changes.meal_id),
                ("meal_type", changes.meal_type),
                ("quantity", changes.quantity),
                ("log_date", changes.log_date),
                ("logged_at", changes.logged_at),
                ("notes", changes.notes),
            )
            if value is not None
        }
        updated = replace(current, **values)
        self.entries[entry_id] = updated
        return updated

    def delete_entry(self, entry_id: UUID) -> bool:
        return self.entries.pop(entry_id, None) is not None

    def list_entries(
        self, query: FoodLogQuery, offset: int, limit: int
    ) -> tuple[list[FoodLogEntry], int]:
        matches = [
            entry
            for entry in self.entries.values()
            if (query.user_id is None or entry.user_id == query.user_id)
            and (query.meal_type is None or entry.meal_type == query.meal_type)
            and (query.start is None or entry.log_date >= query.start)
            and (query.end is None or entry.log_date <= query.end)
        ]
        matches.sort(key=lambda entry: entry.log_date, reverse=True)
        return matches[offset : offset + limit], len(matches)

    def list_entries_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodLogEntry]:
        matches = [
            entry
            for entry in self.entries.values()
            if entry.user_id == user_id and start <= entry.log_date < end
        ]
        return sorted(matches, key=lambda entry: entry.log_date)

    def list_user_entries(self, user_id: UUID) -> list[FoodLogEntry]:
        return [entry for entry in self.entries.values() if entry.user_id == user_id]


@dataclass
class InMemoryMealCatalog(MealCatalog):
    """In-memory meal catalog for tests."""

    meals: dict[UUID, MealFacts] = field(
        default_factory=lambda: {meal.id: meal for meal in (OATMEAL, BANANA, SALAD)}
    )
    batch_lookups: int = 0

    def get_meal(self, meal_id: UUID) -> MealFacts | None:
        return self.meals.get(meal_id)

    def get_meals(self, meal_ids: Iterable[UUID]) -> dict[UUID, MealFacts]:
        self.batch_lookups += 1
        return {
            meal_id: self.meals[meal_id]
            for meal_id in meal_ids
            if meal_id in self.meals
        }


def new_log(  # noqa: PLR0913
    user_id: UUID,
    meal: MealFacts,
    meal_type: MealType = MealType.BREAKFAST,
    quantity: float = 1.0,
    log_date: datetime = TODAY,
    notes: str | None = None,
) -> NewFoodLog:
    return NewFoodLog(
        user_id=user_id,
        meal_id=meal.id,
        meal_type=meal_type,
        quantity=quantity,
        log_date=log_date,
        logged_at=log_date,
        notes=notes,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="test.service.key",
        timezone="UTC",
    )


@pytest.fixture
def repository() -> InMemoryFoodLogRepository:
    return InMemoryFoodLogRepository()


@pytest.fixture
def catalog() -> InMemoryMealCatalog:
    return InMemoryMealCatalog()


@pytest.fixture
def food_log_service(
    repository: InMemoryFoodLogRepository, catalog: InMemoryMealCatalog
) -> FoodLogService:
    return FoodLogService(repository=repository, catalog=catalog, clock=fixed_clock)


@pytest.fixture
def bulk_processor(
    repository: InMemoryFoodLogRepository, catalog: InMemoryMealCatalog
) -> BulkLogProcessor:
    return BulkLogProcessor(repository=repository, catalog=catalog, clock=fixed_clock)


@pytest.fixture
def nutrition_service(
    repository: InMemoryFoodLogRepository, catalog: InMemoryMealCatalog
) -> NutritionService:
    return NutritionService(
        repository=repository, catalog=catalog, clock=fixed_clock
    )


@pytest.fixture
def container(
    settings: Settings,
    repository: InMemoryFoodLogRepository,
    catalog: InMemoryMealCatalog,
) -> AppContainer:
    timezone = ZoneInfo(settings.timezone)
    nutrition_service = NutritionService(
        repository=repository,
        catalog=catalog,
        timezone=timezone,
        clock=fixed_clock,
    )
    return AppContainer(
        settings=settings,
        food_log_service=FoodLogService(
            repository=repository,
            catalog=catalog,
            timezone=timezone,
            clock=fixed_clock,
        ),
        bulk_log_processor=BulkLogProcessor(
            repository=repository,
            catalog=catalog,
            timezone=timezone,
            clock=fixed_clock,
        ),
        nutrition_service=nutrition_service,
        trend_service=TrendService(
            nutrition_service=nutrition_service, clock=fixed_clock
        ),
    )
