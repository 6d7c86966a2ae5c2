"""FastAPI application factory for Pantry Chef.

Wires the recipe pipeline and the recipe repository into a FastAPI app.
Both are explicit instances stored on `app.state`, so tests can pass fakes
without touching module-level state.
"""

import time
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pantry_chef.api.routes import VERSION, router
from pantry_chef.generation.pipeline import RecipePipeline
from pantry_chef.storage.repository import InMemoryRecipeRepository, RecipeRepository
from pantry_chef.utils.config import Config, config
from pantry_chef.utils.logger import logger, request_id_var


async def _invalid_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed bodies/queries with the same 400 envelope as empty ingredient lists."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid request: {location}: {first.get('msg', 'malformed input')}" if location else "Invalid request"
    logger.info(f"{request.method} {request.url.path} rejected: {message}")
    return JSONResponse(status_code=400, content={"success": False, "message": message, "recipes": []})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})


async def _request_context(request: Request, call_next):
    """Tag every log record of a request with its id and log the request duration."""
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    token = request_id_var.set(request_id)
    start = time.perf_counter()
    try:
        response = await call_next(request)
        execution_time_ms = round((time.perf_counter() - start) * 1000)
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={"execution_time_ms": execution_time_ms},
        )
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        request_id_var.reset(token)


def create_app(
    pipeline: Optional[RecipePipeline] = None,
    repository: Optional[RecipeRepository] = None,
    settings: Config = config,
) -> FastAPI:
    """Create the HTTP application.

    Args:
        pipeline: Recipe pipeline. Defaults to a Gemini-backed pipeline built from settings.
        repository: Recipe storage. Defaults to a fresh in-memory repository.
        settings: Application configuration.

    Returns:
        FastAPI: Configured application.
    """
    app = FastAPI(
        title="Pantry Chef API",
        description="Generate recipes from the ingredients you have",
        version=VERSION,
    )

    logger.info(f"CORS origins configured: {settings.CORS_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.pipeline = pipeline if pipeline is not None else RecipePipeline.from_config(settings)
    app.state.repository = repository if repository is not None else InMemoryRecipeRepository()
    app.state.settings = settings

    app.middleware("http")(_request_context)
    app.add_exception_handler(RequestValidationError, _invalid_request_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
    app.include_router(router)

    return app
