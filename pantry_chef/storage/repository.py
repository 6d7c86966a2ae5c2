"""Recipe storage.

The generation pipeline does not depend on storage; the HTTP layer saves
generated recipes here and serves history, likes and the dashboard from it.
Every lookup is scoped to the owner that created the recipe.
"""

import random
import threading
from typing import Optional, Protocol

from pantry_chef.models.models import (
    DashboardData,
    Recipe,
    RecipeHistoryQuery,
    RecipeHistoryResponse,
)
from pantry_chef.utils.logger import logger


TOP_LIKED_LIMIT = 5

_SORT_KEYS = {
    "created_at": lambda recipe: recipe.created_at,
    "title": lambda recipe: recipe.title.lower(),
    "cook_time": lambda recipe: recipe.cook_time,
}


class RecipeRepository(Protocol):
    """Storage contract used by the API layer."""

    def save_many(self, recipes: list[Recipe]) -> None: ...

    def get(self, owner_id: str, recipe_id: str) -> Optional[Recipe]: ...

    def set_liked(self, owner_id: str, recipe_id: str, liked: bool) -> Optional[Recipe]: ...

    def history(self, owner_id: str, query: RecipeHistoryQuery) -> RecipeHistoryResponse: ...

    def dashboard(self, owner_id: str, rng: Optional[random.Random] = None) -> DashboardData: ...


class InMemoryRecipeRepository:
    """Process-local recipe store.

    The lock guards dictionary access only and is never held across an await.
    Recipes are copied on the way in and out so callers cannot mutate stored state.
    """

    def __init__(self) -> None:
        self._recipes: dict[str, Recipe] = {}
        self._lock = threading.Lock()

    def _owned(self, owner_id: str) -> list[Recipe]:
        return [recipe for recipe in self._recipes.values() if recipe.user_id == owner_id]

    def save_many(self, recipes: list[Recipe]) -> None:
        with self._lock:
            for recipe in recipes:
                self._recipes[recipe.id] = recipe.model_copy()
        logger.debug(f"Stored {len(recipes)} recipe(s)")

    def get(self, owner_id: str, recipe_id: str) -> Optional[Recipe]:
        with self._lock:
            recipe = self._recipes.get(recipe_id)
            if recipe is None or recipe.user_id != owner_id:
                return None
            return recipe.model_copy()

    def set_liked(self, owner_id: str, recipe_id: str, liked: bool) -> Optional[Recipe]:
        """Update the liked flag. Returns the updated recipe, or None if the owner has no such recipe."""
        with self._lock:
            recipe = self._recipes.get(recipe_id)
            if recipe is None or recipe.user_id != owner_id:
                return None
            recipe.liked = liked
            return recipe.model_copy()

    def history(self, owner_id: str, query: RecipeHistoryQuery) -> RecipeHistoryResponse:
        """Filter, sort and paginate an owner's recipes.

        Args:
            owner_id: Owner whose recipes are listed.
            query: Filter (all/liked/disliked), sort field and order, page and limit.

        Returns:
            RecipeHistoryResponse with the requested page and `has_more`.
        """
        with self._lock:
            recipes = self._owned(owner_id)

        if query.filter == "liked":
            recipes = [recipe for recipe in recipes if recipe.liked]
        elif query.filter == "disliked":
            recipes = [recipe for recipe in recipes if not recipe.liked]

        recipes.sort(key=_SORT_KEYS[query.sort_by], reverse=query.sort_order == "desc")

        total = len(recipes)
        offset = (query.page - 1) * query.limit
        page = recipes[offset:offset + query.limit]

        return RecipeHistoryResponse(
            recipes=[recipe.model_copy() for recipe in page],
            total=total,
            page=query.page,
            limit=query.limit,
            has_more=offset + query.limit < total,
        )

    def dashboard(self, owner_id: str, rng: Optional[random.Random] = None) -> DashboardData:
        """Summarize an owner's recipes: random liked pick, newest liked, totals."""
        rng = rng or random.Random()

        with self._lock:
            recipes = self._owned(owner_id)

        liked = [recipe for recipe in recipes if recipe.liked]
        newest_liked = sorted(liked, key=lambda recipe: recipe.created_at, reverse=True)

        return DashboardData(
            trending_recipe=rng.choice(liked).model_copy() if liked else None,
            top_liked_recipes=[recipe.model_copy() for recipe in newest_liked[:TOP_LIKED_LIMIT]],
            total_recipes=len(recipes),
            total_liked=len(liked),
        )
