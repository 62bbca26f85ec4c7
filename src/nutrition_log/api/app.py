"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from nutrition_log.api.food_logs import router as food_logs_router
from nutrition_log.app_logging import configure_logging
from nutrition_log.containers import AppContainer
from nutrition_log.errors import FoodLogError, PartialBatchFailure


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI(title="nutrition-log")
    app.state.container = container

    app.include_router(food_logs_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(FoodLogError)
    async def food_log_error_handler(
        request: Request, exc: FoodLogError
    ) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Request %s %s failed: %s", request.method, request.url.path, exc
            )
        body: dict[str, object] = {
            "success": False,
            "error": exc.code,
            "message": exc.message,
        }
        if isinstance(exc, PartialBatchFailure):
            body["failures"] = {
                str(meal_id): reason for meal_id, reason in exc.failures.items()
            }
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": "validation_error",
                "message": _describe_validation_errors(exc),
            },
        )

    return app


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part != "body"
        )
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"
