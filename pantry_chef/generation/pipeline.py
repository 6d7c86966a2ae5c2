"""Recipe generation pipeline.

Sequences prompt building, the generative client, response normalization and
the fallback generator, then stamps identity, owner and creation time onto
each candidate.

Flow (linear, no retries):
1. Empty ingredient list -> ValidationError (no upstream call)
2. Client unavailable -> fallback
3. complete(prompt) raises UpstreamError -> fallback
4. normalize(raw) raises SchemaError -> fallback
5. Candidates -> Recipes (fresh uuid4, owner, liked=False, created_at=now)
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from pantry_chef.generation.errors import SchemaError, UpstreamError, ValidationError
from pantry_chef.generation.fallback import generate_fallback_recipes
from pantry_chef.generation.gemini_client import GeminiRecipeClient
from pantry_chef.generation.normalizer import normalize_recipe_response
from pantry_chef.models.models import GenerationRequest, Recipe, RecipeCandidate
from pantry_chef.prompts.prompts import build_recipe_prompt
from pantry_chef.utils.config import Config, config
from pantry_chef.utils.logger import owner_logger


class RecipeTextGenerator(Protocol):
    """Contract of the generative backend used by the pipeline."""

    async def is_available(self) -> bool: ...

    async def complete(self, prompt: str, timeout: Optional[float] = None) -> str: ...


def _new_recipe_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecipePipeline:
    """Turn a GenerationRequest into a non-empty list of Recipes.

    Holds no per-request state, so one instance can serve concurrent calls.
    """

    def __init__(
        self,
        client: RecipeTextGenerator,
        id_factory: Callable[[], str] = _new_recipe_id,
        clock: Callable[[], datetime] = _utc_now,
        min_recipes: int = 3,
        max_recipes: int = 5,
    ) -> None:
        """Initialize the pipeline.

        Args:
            client: Generative backend (GeminiRecipeClient or any RecipeTextGenerator).
            id_factory: Produces unique recipe ids. Must be collision resistant (default: uuid4).
            clock: Returns the creation timestamp (default: UTC now).
            min_recipes: Lower bound of recipes requested in the prompt.
            max_recipes: Upper bound of recipes requested in the prompt.
        """
        self.client = client
        self.id_factory = id_factory
        self.clock = clock
        self.min_recipes = min_recipes
        self.max_recipes = max_recipes

    @classmethod
    def from_config(cls, settings: Config = config) -> "RecipePipeline":
        """Build a pipeline backed by Gemini from application configuration."""
        return cls(
            client=GeminiRecipeClient.from_config(settings),
            min_recipes=settings.MIN_RECIPES,
            max_recipes=settings.MAX_RECIPES,
        )

    async def _generate_candidates(
        self,
        request: GenerationRequest,
        timeout: Optional[float],
        log: logging.LoggerAdapter,
    ) -> tuple[list[RecipeCandidate], str]:
        if not await self.client.is_available():
            log.warning("Recipe generator unavailable - using fallback recipes")
            return generate_fallback_recipes(request), "fallback"

        prompt = build_recipe_prompt(request, min_recipes=self.min_recipes, max_recipes=self.max_recipes)

        try:
            raw = await self.client.complete(prompt, timeout=timeout)
        except UpstreamError as e:
            log.warning(f"Recipe generator call failed, falling back: {e}")
            return generate_fallback_recipes(request), "fallback"

        try:
            return normalize_recipe_response(raw), "generative"
        except SchemaError as e:
            log.warning(f"Recipe generator returned unusable output, falling back: {e}")
            log.debug(f"Rejected response ({len(raw)} chars): {raw[:200]}")
            return generate_fallback_recipes(request), "fallback"

    async def run(
        self,
        request: GenerationRequest,
        owner_id: str,
        timeout: Optional[float] = None,
    ) -> list[Recipe]:
        """Generate recipes for an owner.

        Args:
            request: Ingredients, preferences and the additional-ingredients flag.
            owner_id: Opaque user or guest id recorded on every recipe.
            timeout: Upstream timeout in seconds (defaults to the client's own).

        Returns:
            list[Recipe]: At least one recipe, in candidate order.

        Raises:
            ValidationError: If the request has no ingredients.
        """
        if not request.ingredients:
            raise ValidationError("Please provide at least one ingredient")

        log = owner_logger(owner_id)
        log.info(
            f"Generating recipes for {len(request.ingredients)} ingredient(s) "
            f"(allow_additional={request.allow_additional_ingredients})"
        )

        candidates, source = await self._generate_candidates(request, timeout, log)

        recipes = [
            Recipe.from_candidate(
                candidate,
                recipe_id=self.id_factory(),
                owner_id=owner_id,
                created_at=self.clock(),
            )
            for candidate in candidates
        ]

        log.info(f"Generated {len(recipes)} recipe(s) from {source} source")
        return recipes
