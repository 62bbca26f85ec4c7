"""Food log API endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Query, Request, Response, status

from nutrition_log.api.models import (
    BulkFoodLogRequest,
    CreateFoodLogRequest,
    UpdateFoodLogRequest,
)
from nutrition_log.domain.days import from_epoch_ms, to_epoch_ms
from nutrition_log.domain.food_logs import (
    BulkLogItem,
    BulkLogResult,
    FoodLogChanges,
    FoodLogPage,
    FoodLogQuery,
    FoodLogView,
)
from nutrition_log.domain.nutrition import (
    DailyNutritionSummary,
    FoodLogStats,
    MacroProfile,
    MealType,
)
from nutrition_log.errors import ValidationError

if TYPE_CHECKING:
    from datetime import datetime

    from nutrition_log.containers import AppContainer

router = APIRouter(prefix="/food-logs", tags=["food-logs"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_food_log(
    payload: CreateFoodLogRequest, request: Request, response: Response
) -> dict[str, object]:
    """Log a meal; an existing entry for the same day and meal type is replaced."""
    view, created = await _container(request).food_log_service.log_meal(
        user_id=payload.user,
        meal_id=payload.meal,
        meal_type=payload.meal_type,
        quantity=payload.quantity,
        log_date=_optional_ms(payload.log_date),
        logged_at=_optional_ms(payload.logged_at),
        notes=payload.notes,
    )
    if created:
        message = "Food log created successfully"
    else:
        response.status_code = status.HTTP_200_OK
        message = "Existing food log updated"
    return {"success": True, "data": _serialize_log(view), "message": message}


@router.post("/bulk", status_code=status.HTTP_201_CREATED)
async def create_bulk_food_log(
    payload: BulkFoodLogRequest, request: Request
) -> dict[str, object]:
    """Log several meals of one meal type at once."""
    result = await _container(request).bulk_log_processor.process_bulk(
        user_id=payload.user,
        meal_type=payload.meal_type,
        items=[
            BulkLogItem(meal_id=item.meal, quantity=item.quantity, notes=item.notes)
            for item in payload.items
        ],
        log_date=_optional_ms(payload.log_date),
        logged_at=_optional_ms(payload.logged_at),
        notes=payload.notes,
    )
    return {
        "success": True,
        "data": _serialize_bulk(result),
        "message": result.message,
    }


@router.get("/meal-types")
async def list_meal_types() -> dict[str, object]:
    """Return the supported meal types."""
    return {"success": True, "data": [meal_type.value for meal_type in MealType]}


@router.get("/search")
async def search_food_logs(  # noqa: PLR0913
    request: Request,
    user_id: UUID | None = Query(default=None, alias="userId"),
    meal_type: MealType | None = Query(default=None, alias="mealType"),
    start_date: int | None = Query(default=None, ge=0, alias="startDate"),
    end_date: int | None = Query(default=None, ge=0, alias="endDate"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1),
) -> dict[str, object]:
    """Search entries by user, meal type and log date."""
    result = _container(request).food_log_service.search(
        FoodLogQuery(
            user_id=user_id,
            meal_type=meal_type,
            start=_optional_ms(start_date),
            end=_optional_ms(end_date),
        ),
        page=page,
        limit=limit,
    )
    return _serialize_page(result)


@router.get("/user/{user_id}")
async def list_user_food_logs(  # noqa: PLR0913
    user_id: UUID,
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=200, ge=1),
    start_date: int | None = Query(default=None, ge=0, alias="startDate"),
    end_date: int | None = Query(default=None, ge=0, alias="endDate"),
) -> dict[str, object]:
    """Return a user's entries, newest log date first."""
    result = _container(request).food_log_service.list_for_user(
        user_id,
        page=page,
        limit=limit,
        start=_optional_ms(start_date),
        end=_optional_ms(end_date),
    )
    return _serialize_page(result)


@router.get("/recent/{user_id}")
async def recent_food_logs(
    user_id: UUID, request: Request, limit: int = Query(default=5, ge=1)
) -> dict[str, object]:
    """Return a user's most recent entries."""
    views = _container(request).food_log_service.recent(user_id, limit=limit)
    return {"success": True, "data": [_serialize_log(view) for view in views]}


@router.get("/meal-type/{user_id}/{meal_type}")
async def food_logs_by_meal_type(
    user_id: UUID,
    meal_type: MealType,
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1),
) -> dict[str, object]:
    """Return a user's entries for one meal type."""
    result = _container(request).food_log_service.list_by_meal_type(
        user_id, meal_type, page=page, limit=limit
    )
    return _serialize_page(result)


@router.get("/daily-nutrition/{user_id}")
async def daily_nutrition(
    user_id: UUID, request: Request, date: int | None = Query(default=None, ge=0)
) -> dict[str, object]:
    """Return the nutrition summary of one day (default today)."""
    summary = _container(request).nutrition_service.daily_summary(
        user_id, _optional_ms(date)
    )
    return {"success": True, "data": _serialize_summary(summary)}


@router.get("/nutrition-range/{user_id}")
async def nutrition_range(
    user_id: UUID,
    request: Request,
    start_date: int | None = Query(default=None, ge=0, alias="startDate"),
    end_date: int | None = Query(default=None, ge=0, alias="endDate"),
) -> dict[str, object]:
    """Return one summary per logged day in the range."""
    if start_date is None or end_date is None:
        raise ValidationError("Start date and end date are required")
    summaries = _container(request).nutrition_service.range_summary(
        user_id, from_epoch_ms(start_date), from_epoch_ms(end_date)
    )
    return {"success": True, "data": [_serialize_summary(s) for s in summaries]}


@router.get("/weekly-trend/{user_id}")
async def weekly_trend(
    user_id: UUID, request: Request, weeks: int = Query(default=4, ge=1)
) -> dict[str, object]:
    """Return daily summaries for the last few weeks."""
    summaries = _container(request).trend_service.weekly_trend(user_id, weeks)
    return {"success": True, "data": [_serialize_summary(s) for s in summaries]}


@router.get("/monthly-trend/{user_id}")
async def monthly_trend(
    user_id: UUID, request: Request, months: int = Query(default=6, ge=1)
) -> dict[str, object]:
    """Return daily summaries for the last few calendar months."""
    summaries = _container(request).trend_service.monthly_trend(user_id, months)
    return {"success": True, "data": [_serialize_summary(s) for s in summaries]}


@router.get("/stats/{user_id}")
async def food_log_stats(user_id: UUID, request: Request) -> dict[str, object]:
    """Return lifetime counters for a user's food log."""
    stats = _container(request).nutrition_service.stats(user_id)
    return {"success": True, "data": _serialize_stats(stats)}


@router.get("/{entry_id}")
async def get_food_log(entry_id: UUID, request: Request) -> dict[str, object]:
    """Return one entry."""
    view = _container(request).food_log_service.get_entry(entry_id)
    return {"success": True, "data": _serialize_log(view)}


@router.put("/{entry_id}")
async def update_food_log(
    entry_id: UUID, payload: UpdateFoodLogRequest, request: Request
) -> dict[str, object]:
    """Update an entry."""
    view = _container(request).food_log_service.update_entry(
        entry_id,
        FoodLogChanges(
            meal_id=payload.meal,
            meal_type=payload.meal_type,
            quantity=payload.quantity,
            log_date=_optional_ms(payload.log_date),
            logged_at=_optional_ms(payload.logged_at),
            notes=payload.notes,
        ),
    )
    return {
        "success": True,
        "data": _serialize_log(view),
        "message": "Food log updated successfully",
    }


@router.delete("/{entry_id}")
async def delete_food_log(entry_id: UUID, request: Request) -> dict[str, object]:
    """Delete an entry."""
    _container(request).food_log_service.delete_entry(entry_id)
    return {"success": True, "message": "Food log deleted successfully"}


def _optional_ms(value: int | None) -> datetime | None:
    return from_epoch_ms(value) if value is not None else None


def _serialize_macros(macros: MacroProfile) -> dict[str, float]:
    return {
        "calories": macros.calories,
        "protein_g": macros.protein_g,
        "fat_g": macros.fat_g,
        "carbs_g": macros.carbs_g,
    }


def _serialize_log(view: FoodLogView) -> dict[str, object]:
    entry = view.entry
    meal = view.meal
    return {
        "id": str(entry.id),
        "user_id": str(entry.user_id),
        "meal_id": str(entry.meal_id),
        "meal_type": entry.meal_type.value,
        "quantity": entry.quantity,
        "log_date": to_epoch_ms(entry.log_date),
        "logged_at": to_epoch_ms(entry.logged_at),
        "notes": entry.notes,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
        "updated_at": entry.updated_at.isoformat() if entry.updated_at else None,
        "meal": {
            "id": str(meal.id),
            "name": meal.name,
            "calories": meal.calories,
            "protein_g": meal.protein_g,
            "fat_g": meal.fat_g,
            "carbs_g": meal.carbs_g,
            "serving_size": meal.serving_size,
            "emoji": meal.emoji,
        }
        if meal
        else None,
        "nutrition": _serialize_macros(view.macros),
    }


def _serialize_page(page: FoodLogPage) -> dict[str, object]:
    return {
        "success": True,
        "data": [_serialize_log(view) for view in page.items],
        "pagination": {
            "page": page.page,
            "pages": page.pages,
            "total": page.total,
            "limit": page.limit,
        },
    }


def _serialize_bulk(result: BulkLogResult) -> dict[str, object]:
    return {
        "created_logs": [_serialize_log(view) for view in result.created_logs],
        "updated_logs": [_serialize_log(view) for view in result.updated_logs],
        "all_logs": [_serialize_log(view) for view in result.all_logs],
        "total_items": result.total_items,
        "new_items": result.new_items_count,
        "updated_items": result.updated_items_count,
        "total_calories": result.totals.calories,
        "total_protein_g": result.totals.protein_g,
        "total_fat_g": result.totals.fat_g,
        "total_carbs_g": result.totals.carbs_g,
        "meal_type": result.meal_type.value,
        "log_date": to_epoch_ms(result.log_date),
        "logged_at": to_epoch_ms(result.logged_at),
    }


def _serialize_summary(summary: DailyNutritionSummary) -> dict[str, object]:
    return {
        "date": summary.day.isoformat(),
        "total_calories": summary.total_calories,
        "total_protein_g": summary.total_protein_g,
        "total_fat_g": summary.total_fat_g,
        "total_carbs_g": summary.total_carbs_g,
        "meal_breakdown": {
            meal_type.value: {
                "calories": bucket.calories,
                "protein_g": bucket.protein_g,
                "fat_g": bucket.fat_g,
                "carbs_g": bucket.carbs_g,
                "items": bucket.items,
            }
            for meal_type, bucket in summary.meal_breakdown.items()
        },
        "total_items": summary.total_items,
    }


def _serialize_stats(stats: FoodLogStats) -> dict[str, object]:
    return {
        "total_logs": stats.total_logs,
        "total_calories": stats.totals.calories,
        "total_protein_g": stats.totals.protein_g,
        "total_fat_g": stats.totals.fat_g,
        "total_carbs_g": stats.totals.carbs_g,
        "average_quantity": stats.average_quantity,
        "meal_type_counts": {
            meal_type.value: count
            for meal_type, count in stats.meal_type_counts.items()
        },
    }
