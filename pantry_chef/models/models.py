"""Data models and schemas for the recipe generation service.

Defines Pydantic models for request/response validation and domain objects.
All models use Pydantic v2 for strict validation and OpenAPI schema generation.

Lifecycle of a recipe:
- GenerationRequest: what the caller asks for (ingredients + preferences)
- RecipeCandidate: recipe-shaped record parsed from the model or built by the fallback
- Recipe: candidate plus identity, owner, liked flag and creation timestamp
"""

import math
import re
from datetime import datetime
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


Difficulty = Literal["easy", "medium", "hard"]
SpiceLevel = Literal["mild", "medium", "hot"]
CookingTimePreference = Literal["quick", "medium", "long"]
HistoryFilter = Literal["all", "liked", "disliked"]
SortField = Literal["created_at", "title", "cook_time"]
SortOrder = Literal["asc", "desc"]

_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)")


def _leading_int(value):
    """Coerce "15 minutes" / 15.0 style values to int, leave anything else for Pydantic to judge.

    Non-finite numbers (Infinity, 1e999, NaN) are passed through unchanged so
    Pydantic rejects them as a validation error.
    """
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return value
        number = float(match.group(1))
        return round(number) if math.isfinite(number) else value
    if isinstance(value, float) and math.isfinite(value):
        return round(value)
    return value


def _clean_string_list(value):
    """Strip entries, render numbers as text and drop blanks. Other types are left for Pydantic to reject."""
    if value is None:
        return None
    if not isinstance(value, list):
        return value
    cleaned = []
    for item in value:
        if isinstance(item, (int, float)) and not isinstance(item, bool):
            item = f"{item:g}"
        if isinstance(item, str):
            item = item.strip()
            if not item:
                continue
        cleaned.append(item)
    return cleaned


class UserPreferences(BaseModel):
    """Optional preference bundle for recipe generation.

    Every field is independently optional. A missing field means
    "no constraint", never a default value.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    dietary_restrictions: Annotated[
        Optional[List[str]],
        Field(max_length=20, description="Dietary restrictions (vegetarian, gluten-free, ...)"),
    ] = None
    preferred_cuisines: Annotated[
        Optional[List[str]],
        Field(max_length=20, description="Preferred cuisines (Italian, Thai, ...)"),
    ] = None
    spice_level: Annotated[Optional[SpiceLevel], Field(description="mild, medium or hot")] = None
    cooking_time_preference: Annotated[
        Optional[CookingTimePreference], Field(description="quick, medium or long")
    ] = None

    @field_validator("dietary_restrictions", "preferred_cuisines", mode="before")
    @classmethod
    def drop_blank_entries(cls, value):
        """Strip entries and drop blanks so an empty bundle renders no prompt lines."""
        return _clean_string_list(value)

    @field_validator("spice_level", "cooking_time_preference", mode="before")
    @classmethod
    def normalize_choice(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value


class GenerationRequest(BaseModel):
    """Input to the recipe generation pipeline.

    The ingredient list may be empty at this level; the pipeline rejects it
    so that the HTTP layer can answer with a friendly message instead of a
    schema dump.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    ingredients: Annotated[
        List[Annotated[str, Field(max_length=100)]],
        Field(default_factory=list, max_length=100, description="Available ingredient names (1-100 chars each), in order"),
    ]
    preferences: Annotated[Optional[UserPreferences], Field(description="Optional preference bundle")] = None
    allow_additional_ingredients: Annotated[
        bool, Field(description="Allow the model to add essential ingredients (flagged)")
    ] = False

    @field_validator("ingredients", mode="before")
    @classmethod
    def clean_ingredients(cls, value):
        """Strip ingredient names and drop blank entries, preserving order."""
        if value is None:
            return []
        return _clean_string_list(value)

    @field_validator("allow_additional_ingredients", mode="before")
    @classmethod
    def null_means_false(cls, value):
        return False if value is None else value


class Ingredient(BaseModel):
    """Ingredient line of a recipe. Amount is free-form text ("2", "to taste")."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Annotated[str, Field(min_length=1, max_length=200, description="Ingredient name")]
    amount: Annotated[str, Field(max_length=100, description="Quantity, numeric or qualitative")] = ""
    unit: Annotated[Optional[str], Field(max_length=50, description="Measurement unit")] = None

    @field_validator("amount", mode="before")
    @classmethod
    def amount_as_text(cls, value):
        if value is None:
            return ""
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return f"{value:g}"
        return value

    @field_validator("unit", mode="before")
    @classmethod
    def unit_as_text(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return f"{value:g}"
        if isinstance(value, str) and not value.strip():
            return None
        return value


class RecipeCandidate(BaseModel):
    """Recipe-shaped record before identity, ownership and timestamp are assigned.

    Produced by the response normalizer (from model output) or by the
    fallback generator. Unknown keys in model output are ignored.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: Annotated[str, Field(min_length=1, max_length=300, description="Recipe title (1-300 chars)")]
    description: Annotated[str, Field(description="Short summary")] = ""
    ingredients: Annotated[
        List[Ingredient], Field(min_length=1, max_length=100, description="Ingredient lines (1-100)")
    ]
    instructions: Annotated[
        List[Annotated[str, Field(min_length=1)]],
        Field(min_length=1, max_length=100, description="Ordered cooking steps (1-100)"),
    ]
    prep_time: Annotated[int, Field(ge=0, le=1440, description="Preparation time in minutes")] = 0
    cook_time: Annotated[int, Field(ge=0, le=1440, description="Cooking time in minutes")] = 0
    servings: Annotated[int, Field(ge=1, le=100, description="Number of servings")] = 1
    difficulty: Annotated[Difficulty, Field(description="easy, medium or hard")] = "medium"
    cuisine_type: Annotated[Optional[str], Field(max_length=100, description="Cuisine name")] = None

    @field_validator("description", mode="before")
    @classmethod
    def null_description(cls, value):
        return "" if value is None else value

    @field_validator("prep_time", "cook_time", mode="before")
    @classmethod
    def coerce_minutes(cls, value):
        return 0 if value is None else _leading_int(value)

    @field_validator("servings", mode="before")
    @classmethod
    def coerce_servings(cls, value):
        return 1 if value is None else _leading_int(value)

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, value):
        if value is None:
            return "medium"
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("cuisine_type", mode="before")
    @classmethod
    def blank_cuisine_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class Recipe(RecipeCandidate):
    """Stored recipe. Only `liked` changes after creation."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", validate_assignment=True)

    id: Annotated[str, Field(frozen=True, description="Unique recipe identifier")]
    user_id: Annotated[str, Field(frozen=True, description="Owner (user id or guest id)")]
    liked: Annotated[bool, Field(description="Liked by the owner")] = False
    created_at: Annotated[datetime, Field(frozen=True, description="Creation timestamp (UTC)")]

    @classmethod
    def from_candidate(
        cls,
        candidate: RecipeCandidate,
        *,
        recipe_id: str,
        owner_id: str,
        created_at: datetime,
    ) -> "Recipe":
        return cls(
            **candidate.model_dump(),
            id=recipe_id,
            user_id=owner_id,
            liked=False,
            created_at=created_at,
        )


class GenerateRecipeResponse(BaseModel):
    """Envelope returned by POST /api/recipes/generate."""

    recipes: Annotated[List[Recipe], Field(default_factory=list)]
    success: bool
    message: Optional[str] = None


class RecipeHistoryQuery(BaseModel):
    """History listing parameters. Unknown filter or sort values fall back to the defaults."""

    filter: Annotated[HistoryFilter, Field(description="all, liked or disliked")] = "all"
    sort_by: Annotated[SortField, Field(description="created_at, title or cook_time")] = "created_at"
    sort_order: Annotated[SortOrder, Field(description="asc or desc")] = "desc"
    page: Annotated[int, Field(ge=1)] = 1
    limit: Annotated[int, Field(ge=1)] = 10

    @field_validator("filter", mode="before")
    @classmethod
    def default_filter(cls, value):
        return value if value in ("all", "liked", "disliked") else "all"

    @field_validator("sort_by", mode="before")
    @classmethod
    def default_sort_field(cls, value):
        return value if value in ("created_at", "title", "cook_time") else "created_at"

    @field_validator("sort_order", mode="before")
    @classmethod
    def default_sort_order(cls, value):
        return "asc" if value == "asc" else "desc"


class RecipeHistoryResponse(BaseModel):
    recipes: Annotated[List[Recipe], Field(default_factory=list)]
    total: Annotated[int, Field(ge=0)]
    page: Annotated[int, Field(ge=1)]
    limit: Annotated[int, Field(ge=1)]
    has_more: bool


class LikeRecipeRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    recipe_id: Annotated[str, Field(min_length=1)]
    liked: bool


class LikeRecipeResponse(BaseModel):
    success: bool
    recipe: Optional[Recipe] = None
    message: Optional[str] = None


class DashboardData(BaseModel):
    """Per-owner summary: a random liked recipe, the newest liked ones and counters."""

    trending_recipe: Optional[Recipe] = None
    top_liked_recipes: Annotated[List[Recipe], Field(default_factory=list, max_length=5)]
    total_recipes: Annotated[int, Field(ge=0)] = 0
    total_liked: Annotated[int, Field(ge=0)] = 0
