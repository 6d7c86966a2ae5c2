"""HTTP endpoints for recipe generation, history, likes and the dashboard.

Endpoints:
- POST /api/recipes/generate: Generate recipes from ingredients (and store them)
- GET  /api/recipes/history: Filtered, sorted, paginated recipe history
- POST /api/recipes/like: Like or unlike a recipe
- GET  /api/recipes/{recipe_id}: Single recipe
- GET  /api/dashboard: Liked-recipe summary
- GET  /api/health: Service health
- GET  /api/ready: Readiness per service
- GET  /api/ping: Liveness ping

Caller identity comes from the `user-id` header. Without it a guest id is
generated for the request.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse

from pantry_chef.generation.errors import ValidationError
from pantry_chef.generation.pipeline import RecipePipeline
from pantry_chef.models.models import (
    DashboardData,
    GenerateRecipeResponse,
    GenerationRequest,
    LikeRecipeRequest,
    LikeRecipeResponse,
    Recipe,
    RecipeHistoryQuery,
    RecipeHistoryResponse,
)
from pantry_chef.storage.repository import RecipeRepository
from pantry_chef.utils.config import Config
from pantry_chef.utils.logger import owner_logger


VERSION = "1.0.0"

router = APIRouter(prefix="/api", tags=["recipes"])


def get_owner_id(user_id: Optional[str] = Header(None, alias="user-id")) -> str:
    """Resolve the caller: the `user-id` header, or a fresh guest id."""
    if user_id and user_id.strip():
        return user_id.strip()
    return f"guest-{uuid.uuid4().hex}"


def get_pipeline(request: Request) -> RecipePipeline:
    return request.app.state.pipeline


def get_repository(request: Request) -> RecipeRepository:
    return request.app.state.repository


def get_settings(request: Request) -> Config:
    return request.app.state.settings


@router.post("/recipes/generate", response_model=GenerateRecipeResponse)
async def generate_recipes(
    body: GenerationRequest,
    owner_id: str = Depends(get_owner_id),
    pipeline: RecipePipeline = Depends(get_pipeline),
    repository: RecipeRepository = Depends(get_repository),
    settings: Config = Depends(get_settings),
):
    """Generate recipes for the caller's ingredients.

    Returns 400 with `success=false` when no ingredient is given. Generator
    failures are absorbed by the pipeline (fallback recipes), and storage
    failures are logged without failing the request.
    """
    try:
        recipes = await pipeline.run(body, owner_id, timeout=settings.REQUEST_TIMEOUT_SECONDS)
    except ValidationError as e:
        owner_logger(owner_id).info(f"Rejected generation request: {e}")
        return JSONResponse(
            status_code=400,
            content=GenerateRecipeResponse(success=False, message=str(e)).model_dump(mode="json"),
        )

    try:
        repository.save_many(recipes)
    except Exception as e:
        owner_logger(owner_id).warning(f"Saving recipes failed, continuing without persistence: {e}")

    return GenerateRecipeResponse(recipes=recipes, success=True)


@router.get("/recipes/history", response_model=RecipeHistoryResponse)
def get_recipe_history(
    filter: str = Query("all", description="all, liked or disliked"),
    sort_by: str = Query("created_at", description="created_at, title or cook_time"),
    sort_order: str = Query("desc", description="asc or desc"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    owner_id: str = Depends(get_owner_id),
    repository: RecipeRepository = Depends(get_repository),
    settings: Config = Depends(get_settings),
):
    """List the caller's recipes. The page size is capped at HISTORY_PAGE_LIMIT."""
    query = RecipeHistoryQuery(
        filter=filter,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=min(limit, settings.HISTORY_PAGE_LIMIT),
    )
    return repository.history(owner_id, query)


@router.post("/recipes/like", response_model=LikeRecipeResponse)
def like_recipe(
    body: LikeRecipeRequest,
    owner_id: str = Depends(get_owner_id),
    repository: RecipeRepository = Depends(get_repository),
):
    recipe = repository.set_liked(owner_id, body.recipe_id, body.liked)
    if recipe is None:
        return JSONResponse(
            status_code=404,
            content=LikeRecipeResponse(success=False, message="Recipe not found").model_dump(mode="json"),
        )

    owner_logger(owner_id).info(f"Recipe {recipe.id} liked={recipe.liked}")
    return LikeRecipeResponse(success=True, recipe=recipe)


@router.get("/recipes/{recipe_id}", response_model=Recipe)
def get_recipe(
    recipe_id: str,
    owner_id: str = Depends(get_owner_id),
    repository: RecipeRepository = Depends(get_repository),
):
    recipe = repository.get(owner_id, recipe_id)
    if recipe is None:
        return JSONResponse(status_code=404, content={"message": "Recipe not found"})
    return recipe


@router.get("/dashboard", response_model=DashboardData)
def get_dashboard(
    owner_id: str = Depends(get_owner_id),
    repository: RecipeRepository = Depends(get_repository),
):
    return repository.dashboard(owner_id)


@router.get("/health")
def health_check(pipeline: RecipePipeline = Depends(get_pipeline)):
    """Report service health. Degraded (503) when the generator has no credentials."""
    generator_configured = getattr(pipeline.client, "is_configured", False)

    health = {
        "status": "healthy" if generator_configured else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": VERSION,
        "services": {
            "generator": "configured" if generator_configured else "not_configured",
        },
    }
    return JSONResponse(status_code=200 if generator_configured else 503, content=health)


@router.get("/ready")
def readiness_check(
    pipeline: RecipePipeline = Depends(get_pipeline),
    repository: RecipeRepository = Depends(get_repository),
):
    """Report per-service readiness. 503 unless every check passes."""
    checks = {
        "generator": bool(getattr(pipeline.client, "is_configured", False)),
        "storage": repository is not None,
    }
    ready = all(checks.values())
    return JSONResponse(status_code=200 if ready else 503, content={"ready": ready, "checks": checks})


@router.get("/ping")
def ping(settings: Config = Depends(get_settings)):
    return {"message": settings.PING_MESSAGE}
