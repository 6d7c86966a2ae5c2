"""Unit tests for the recipe generation pipeline.

Tests cover:
- Validation before any upstream call
- Degradation to fallback recipes (unavailable, upstream error, bad output)
- Identity, owner, liked and timestamp assignment
"""

import asyncio
import json
from datetime import datetime, timezone
from itertools import count

import pytest

from pantry_chef.generation.errors import UpstreamError, ValidationError
from pantry_chef.generation.gemini_client import GeminiRecipeClient
from pantry_chef.generation.pipeline import RecipePipeline
from pantry_chef.models.models import GenerationRequest, UserPreferences
from pantry_chef.utils.config import Config


FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeClient:
    """Scripted generative backend that records its calls."""

    def __init__(self, available=True, reply=None, error=None):
        self.available = available
        self.reply = reply
        self.error = error
        self.availability_checks = 0
        self.prompts = []
        self.timeouts = []

    async def is_available(self):
        self.availability_checks += 1
        return self.available

    async def complete(self, prompt, timeout=None):
        self.prompts.append(prompt)
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        return self.reply


def recipe_json(*titles):
    return json.dumps(
        [
            {
                "title": title,
                "description": "Generated.",
                "ingredients": [{"name": "tomato", "amount": "2", "unit": "whole"}],
                "instructions": ["Cook it"],
                "prep_time": 5,
                "cook_time": 10,
                "servings": 2,
                "difficulty": "easy",
                "cuisine_type": "Italian",
            }
            for title in titles
        ]
    )


def make_pipeline(client, **kwargs):
    ids = count(1)
    return RecipePipeline(client, id_factory=lambda: f"recipe-{next(ids)}", clock=lambda: FIXED_NOW, **kwargs)


TOMATO_REQUEST = GenerationRequest(ingredients=["tomato", "basil", "pasta"])


class TestValidation:
    """Test request validation."""

    @pytest.mark.asyncio
    async def test_empty_ingredients_rejected_before_any_call(self):
        client = FakeClient()
        pipeline = make_pipeline(client)

        with pytest.raises(ValidationError, match="at least one ingredient"):
            await pipeline.run(GenerationRequest(ingredients=[]), "user-1")

        assert client.availability_checks == 0
        assert client.prompts == []

    @pytest.mark.asyncio
    async def test_blank_only_ingredients_rejected(self):
        pipeline = make_pipeline(FakeClient())

        with pytest.raises(ValidationError):
            await pipeline.run(GenerationRequest(ingredients=["  ", ""]), "user-1")

    def test_validation_error_is_value_error(self):
        assert issubclass(ValidationError, ValueError)


class TestGenerativePath:
    """Test successful generation."""

    @pytest.mark.asyncio
    async def test_returns_generated_recipes_in_order(self):
        client = FakeClient(reply=recipe_json("One", "Two", "Three"))

        recipes = await make_pipeline(client).run(TOMATO_REQUEST, "user-1")

        assert [recipe.title for recipe in recipes] == ["One", "Two", "Three"]
        assert len(client.prompts) == 1
        assert "Available ingredients: tomato, basil, pasta" in client.prompts[0]

    @pytest.mark.asyncio
    async def test_assigns_identity_owner_and_timestamp(self):
        client = FakeClient(reply=recipe_json("One", "Two"))

        recipes = await make_pipeline(client).run(TOMATO_REQUEST, "user-7")

        assert [recipe.id for recipe in recipes] == ["recipe-1", "recipe-2"]
        assert all(recipe.user_id == "user-7" for recipe in recipes)
        assert all(recipe.liked is False for recipe in recipes)
        assert all(recipe.created_at == FIXED_NOW for recipe in recipes)

    @pytest.mark.asyncio
    async def test_default_ids_are_unique_uuids(self):
        client = FakeClient(reply=recipe_json("One", "Two", "Three"))

        recipes = await RecipePipeline(client).run(TOMATO_REQUEST, "user-1")

        ids = [recipe.id for recipe in recipes]
        assert len(set(ids)) == 3
        assert all(len(recipe_id) == 36 for recipe_id in ids)
        assert all(recipe.created_at.tzinfo is not None for recipe in recipes)

    @pytest.mark.asyncio
    async def test_single_object_reply_accepted(self):
        reply = json.dumps(json.loads(recipe_json("Solo"))[0])

        recipes = await make_pipeline(FakeClient(reply=reply)).run(TOMATO_REQUEST, "user-1")

        assert [recipe.title for recipe in recipes] == ["Solo"]

    @pytest.mark.asyncio
    async def test_fenced_reply_accepted(self):
        reply = "```json\n" + recipe_json("Fenced") + "\n```"

        recipes = await make_pipeline(FakeClient(reply=reply)).run(TOMATO_REQUEST, "user-1")

        assert recipes[0].title == "Fenced"

    @pytest.mark.asyncio
    async def test_passes_timeout_and_prompt_options(self):
        client = FakeClient(reply=recipe_json("One"))
        request = GenerationRequest(
            ingredients=["egg"],
            preferences=UserPreferences(spice_level="hot"),
            allow_additional_ingredients=True,
        )

        await make_pipeline(client, min_recipes=2, max_recipes=4).run(request, "user-1", timeout=12)

        assert client.timeouts == [12]
        assert "Please provide 2-4 complete recipes" in client.prompts[0]
        assert "- Spice level: hot" in client.prompts[0]
        assert "ADDITIONAL NEEDED" in client.prompts[0]


class TestFallbackPath:
    """Test degradation to fallback recipes."""

    @pytest.mark.asyncio
    async def test_unavailable_client_uses_fallback_without_completion(self):
        client = FakeClient(available=False)

        recipes = await make_pipeline(client).run(TOMATO_REQUEST, "guest-1")

        assert client.prompts == []
        assert [recipe.title for recipe in recipes] == ["Quick tomato Stir-Fry", "tomato and basil Soup"]
        for recipe in recipes:
            names = {ingredient.name for ingredient in recipe.ingredients}
            assert {"tomato", "basil", "pasta"} <= names
            assert recipe.difficulty == "easy"
            assert recipe.cook_time >= 0
            assert recipe.prep_time >= 0
            assert recipe.title.strip()
            assert recipe.instructions and all(step.strip() for step in recipe.instructions)
            assert recipe.ingredients
            assert recipe.user_id == "guest-1"
            assert recipe.liked is False

    @pytest.mark.asyncio
    async def test_upstream_error_uses_fallback(self):
        client = FakeClient(error=UpstreamError("Gemini request timed out after 60s"))

        recipes = await make_pipeline(client).run(TOMATO_REQUEST, "user-1")

        assert len(client.prompts) == 1
        assert recipes[0].title == "Quick tomato Stir-Fry"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            "Sorry, I cannot help with that.",
            "[]",
            '"just a string"',
            json.dumps([{"title": "No steps", "ingredients": [{"name": "x"}], "instructions": []}]),
        ],
    )
    async def test_unusable_reply_uses_fallback(self, reply):
        recipes = await make_pipeline(FakeClient(reply=reply)).run(TOMATO_REQUEST, "user-1")

        assert [recipe.title for recipe in recipes] == ["Quick tomato Stir-Fry", "tomato and basil Soup"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("literal", ["Infinity", "1e999"])
    async def test_overflowing_number_in_reply_uses_fallback(self, literal):
        reply = recipe_json("Endless").replace('"prep_time": 5', f'"prep_time": {literal}')

        recipes = await make_pipeline(FakeClient(reply=reply)).run(GenerationRequest(ingredients=["egg"]), "user-1")

        assert [recipe.title for recipe in recipes] == ["Quick egg Stir-Fry"]

    @pytest.mark.asyncio
    async def test_fallback_recipes_get_fresh_identity(self):
        recipes = await make_pipeline(FakeClient(available=False)).run(TOMATO_REQUEST, "user-1")

        assert [recipe.id for recipe in recipes] == ["recipe-1", "recipe-2"]
        assert all(recipe.liked is False for recipe in recipes)

    @pytest.mark.asyncio
    async def test_unconfigured_gemini_client_degrades(self):
        pipeline = make_pipeline(GeminiRecipeClient(api_key=""))

        recipes = await pipeline.run(GenerationRequest(ingredients=["chicken"]), "user-1")

        assert [recipe.title for recipe in recipes] == ["Quick chicken Stir-Fry"]

    @pytest.mark.asyncio
    async def test_unexpected_client_errors_propagate(self):
        client = FakeClient(error=RuntimeError("bug"))

        with pytest.raises(RuntimeError):
            await make_pipeline(client).run(TOMATO_REQUEST, "user-1")


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_runs_are_independent(self):
        pipeline = RecipePipeline(FakeClient(available=False))

        first, second = await asyncio.gather(
            pipeline.run(GenerationRequest(ingredients=["rice", "beans"]), "user-a"),
            pipeline.run(GenerationRequest(ingredients=["leek", "potato"]), "user-b"),
        )

        assert {recipe.user_id for recipe in first} == {"user-a"}
        assert {recipe.user_id for recipe in second} == {"user-b"}
        assert first[1].title == "rice and beans Soup"
        assert second[1].title == "leek and potato Soup"
        assert not {recipe.id for recipe in first} & {recipe.id for recipe in second}


class TestFromConfig:
    def test_builds_gemini_pipeline(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "")
        monkeypatch.setenv("MIN_RECIPES", "2")
        monkeypatch.setenv("MAX_RECIPES", "3")

        pipeline = RecipePipeline.from_config(Config())

        assert isinstance(pipeline.client, GeminiRecipeClient)
        assert (pipeline.min_recipes, pipeline.max_recipes) == (2, 3)
