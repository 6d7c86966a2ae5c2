"""Deterministic fallback recipes.

Used when Gemini is not configured, unreachable, or returns output the
normalizer rejects. Recipes are built only from the supplied ingredient
names plus a couple of pantry staples, so the same request always yields the
same candidates.
"""

from pantry_chef.models.models import GenerationRequest, Ingredient, RecipeCandidate


STIR_FRY_MAX_INGREDIENTS = 4
SOUP_MAX_INGREDIENTS = 3

STIR_FRY_STEPS = [
    "Heat oil in a large pan over medium-high heat",
    "Add your main ingredients and cook for 5-7 minutes",
    "Season with salt and any available spices",
    "Stir-fry until ingredients are tender and well combined",
    "Serve hot and enjoy!",
]

SOUP_STEPS = [
    "Bring water or broth to a boil in a large pot",
    "Add your ingredients starting with the longest-cooking items",
    "Simmer for 20-25 minutes until everything is tender",
    "Season to taste with salt, pepper, or available herbs",
    "Serve hot with crusty bread if available",
]


def _cups_of(names: list[str]) -> list[Ingredient]:
    return [Ingredient(name=name, amount="1", unit="cup") for name in names]


def _stir_fry(ingredients: list[str]) -> RecipeCandidate:
    lead = ingredients[0] if ingredients else "Ingredient"
    return RecipeCandidate(
        title=f"Quick {lead} Stir-Fry",
        description="A simple and delicious stir-fry that brings out the best flavors of your available ingredients.",
        ingredients=_cups_of(ingredients[:STIR_FRY_MAX_INGREDIENTS])
        + [
            Ingredient(name="oil", amount="2", unit="tbsp"),
            Ingredient(name="salt", amount="1", unit="tsp"),
        ],
        instructions=STIR_FRY_STEPS,
        prep_time=10,
        cook_time=15,
        servings=2,
        difficulty="easy",
        cuisine_type="fusion",
    )


def _soup(ingredients: list[str]) -> RecipeCandidate:
    return RecipeCandidate(
        title=f"{ingredients[0]} and {ingredients[1]} Soup",
        description="A comforting, hearty soup that makes the most of your pantry ingredients.",
        ingredients=_cups_of(ingredients[:SOUP_MAX_INGREDIENTS])
        + [
            Ingredient(name="water or broth", amount="4", unit="cups"),
            Ingredient(name="seasoning", amount="to taste"),
        ],
        instructions=SOUP_STEPS,
        prep_time=15,
        cook_time=25,
        servings=4,
        difficulty="easy",
        cuisine_type="comfort food",
    )


def generate_fallback_recipes(request: GenerationRequest) -> list[RecipeCandidate]:
    """Build placeholder recipes from the request's ingredients.

    Always returns a stir-fry (first 4 ingredients + oil and salt). Adds a
    soup (first 3 ingredients + broth and seasoning) when more than one
    ingredient was supplied. Never raises.

    Args:
        request: Generation request; only `ingredients` is used.

    Returns:
        list[RecipeCandidate]: One or two candidates, stir-fry first.
    """
    ingredients = list(request.ingredients)

    candidates = [_stir_fry(ingredients)]
    if len(ingredients) > 1:
        candidates.append(_soup(ingredients))

    return candidates
