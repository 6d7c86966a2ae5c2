#!/usr/bin/env python3
"""Ad hoc recipe generation runner.

Run the generation pipeline directly without starting the API server.

Usage:
    python query.py "chicken, rice, garlic"
    python query.py --debug "chicken, rice"            # Show full JSON response
    python query.py --offline "chicken, rice"          # Skip Gemini, use fallback recipes
    python query.py --allow-additional "eggs, flour"   # Let the model add flagged ingredients
    python query.py --spice hot --time quick --diet vegetarian --cuisine Thai "tofu, rice"

Features:
- Single pipeline run with Markdown-rendered recipes
- Debug mode to display full JSON with all fields
- Offline mode to exercise the deterministic fallback
- Clean exit after completion
"""

import asyncio
import json
import sys

from rich.console import Console
from rich.markdown import Markdown

from pantry_chef.generation.errors import ValidationError
from pantry_chef.generation.gemini_client import GeminiRecipeClient
from pantry_chef.generation.pipeline import RecipePipeline
from pantry_chef.models.models import GenerationRequest, Recipe, UserPreferences
from pantry_chef.utils.config import config
from pantry_chef.utils.logger import logger

console = Console()

CLI_OWNER_ID = "cli"

USAGE = 'Usage: python query.py [--debug] [--offline] [--allow-additional] [--spice LEVEL] [--time PREF] [--diet X] [--cuisine X] "<ingredients>"'


def recipe_to_markdown(recipe: Recipe) -> str:
    """Render a recipe as Markdown for terminal display."""
    lines = [f"## {recipe.title}", ""]
    if recipe.description:
        lines += [recipe.description, ""]

    meta = f"**Prep:** {recipe.prep_time} min · **Cook:** {recipe.cook_time} min · **Serves:** {recipe.servings} · **Difficulty:** {recipe.difficulty}"
    if recipe.cuisine_type:
        meta += f" · **Cuisine:** {recipe.cuisine_type}"
    lines += [meta, "", "### Ingredients"]

    for ingredient in recipe.ingredients:
        parts = (ingredient.amount, ingredient.unit or "", ingredient.name)
        lines.append("- " + " ".join(part for part in parts if part))

    lines += ["", "### Instructions"]
    lines += [f"{number}. {step}" for number, step in enumerate(recipe.instructions, start=1)]
    return "\n".join(lines)


def run_query(
    ingredients_text: str,
    debug: bool = False,
    offline: bool = False,
    allow_additional: bool = False,
    preferences: dict = None,
) -> None:
    """Execute a single generation request and print the recipes.

    Args:
        ingredients_text: Comma-separated ingredient names.
        debug: If True, display full JSON response with all fields.
        offline: If True, run without Gemini credentials (fallback recipes).
        allow_additional: Allow the model to suggest flagged extra ingredients.
        preferences: Optional preference fields (UserPreferences keys).
    """
    try:
        client = GeminiRecipeClient.from_config(config)
        if offline:
            client.api_key = ""
        pipeline = RecipePipeline(client, min_recipes=config.MIN_RECIPES, max_recipes=config.MAX_RECIPES)

        request = GenerationRequest(
            ingredients=[item for item in ingredients_text.split(",")],
            preferences=UserPreferences(**preferences) if preferences else None,
            allow_additional_ingredients=allow_additional,
        )

        logger.info(f"Running query: {', '.join(request.ingredients)}")
        logger.info("---")

        recipes = asyncio.run(pipeline.run(request, CLI_OWNER_ID))

        logger.info("---")
        console.print()

        if debug:
            console.print("[bold cyan]Debug Mode: Full Response[/bold cyan]")
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print_json(json.dumps([recipe.model_dump(mode="json") for recipe in recipes]))
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print()

        for recipe in recipes:
            console.print(Markdown(recipe_to_markdown(recipe)))
            console.print()

    except ValidationError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Query execution failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        print("")
        print("Examples:")
        print('  python query.py "chicken, rice"')
        print('  python query.py --debug "chicken, rice"')
        print('  python query.py --offline "tomato, basil, pasta"')
        print('  python query.py --spice hot --cuisine Thai "tofu, rice, peanuts"')
        sys.exit(1)

    debug_mode = False
    offline_mode = False
    allow_additional = False
    preferences = {}
    value_flags = {
        "--spice": "spice_level",
        "--time": "cooking_time_preference",
        "--diet": "dietary_restrictions",
        "--cuisine": "preferred_cuisines",
    }
    argv_start = 1

    while argv_start < len(sys.argv) and sys.argv[argv_start].startswith("--"):
        flag = sys.argv[argv_start]
        if flag == "--debug":
            debug_mode = True
            argv_start += 1
        elif flag == "--offline":
            offline_mode = True
            argv_start += 1
        elif flag == "--allow-additional":
            allow_additional = True
            argv_start += 1
        elif flag in value_flags:
            argv_start += 1
            if argv_start >= len(sys.argv):
                print(f"Error: {flag} flag requires a value")
                sys.exit(1)
            field = value_flags[flag]
            value = sys.argv[argv_start]
            if field in ("dietary_restrictions", "preferred_cuisines"):
                preferences.setdefault(field, []).append(value)
            else:
                preferences[field] = value
            argv_start += 1
        else:
            print(f"Unknown flag: {flag}")
            sys.exit(1)

    if argv_start >= len(sys.argv):
        print("Error: No ingredients provided")
        print(USAGE)
        sys.exit(1)

    # Join all arguments after flags (handles unquoted ingredient lists)
    ingredients_text = ",".join(sys.argv[argv_start:])

    run_query(
        ingredients_text,
        debug=debug_mode,
        offline=offline_mode,
        allow_additional=allow_additional,
        preferences=preferences,
    )
