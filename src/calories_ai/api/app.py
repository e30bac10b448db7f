"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from calories_ai.api.auth import router as auth_router
from calories_ai.api.meals import router as meals_router
from calories_ai.api.rpc import router as rpc_router
from calories_ai.app_logging import configure_logging
from calories_ai.containers import AppContainer
from calories_ai.errors import CaloriesAIError, InvalidArgument


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(auth_router)
    app.include_router(rpc_router)
    app.include_router(meals_router)

    @app.exception_handler(CaloriesAIError)
    async def handle_app_error(request: Request, exc: CaloriesAIError) -> JSONResponse:
        if exc.http_status >= 500:
            logger.error(
                "Request failed",
                extra={"path": request.url.path, "code": exc.code},
            )
        return JSONResponse(
            status_code=exc.http_status,
            content={"error": _error_payload(container, exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = InvalidArgument("Invalid data", details=_jsonable_errors(exc))
        return JSONResponse(
            status_code=error.http_status, content={"error": error.to_payload()}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _error_payload(container: AppContainer, exc: CaloriesAIError) -> dict[str, object]:
    """Return the wire error body with local debug info for server faults."""
    payload = exc.to_payload()
    cause = exc.__cause__
    if (
        container.settings.environment == "local"
        and exc.http_status >= 500
        and cause is not None
    ):
        payload["debug"] = f"{type(cause).__name__}: {cause}".strip()
    return payload


def _jsonable_errors(exc: RequestValidationError) -> list[dict[str, object]]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
