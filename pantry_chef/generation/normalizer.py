"""Normalization of raw Gemini text into validated recipe candidates.

Model output is unreliable: it may arrive wrapped in markdown fences despite
the prompt saying otherwise, or return one object instead of an array. The
normalizer removes fence wrappers, parses JSON once and validates every
element. There is no secondary JSON repair: anything that does not parse is
a SchemaError and the pipeline falls back.
"""

import json
import re
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from pantry_chef.generation.errors import SchemaError
from pantry_chef.models.models import RecipeCandidate
from pantry_chef.utils.logger import logger


_JSON_FENCE_OPEN = re.compile(r"^```json\s*")
_FENCE_OPEN = re.compile(r"^```\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")
_STRAY_BACKTICKS = re.compile(r"^`+|`+$")


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapper from model output.

    Steps:
    1. Trim surrounding whitespace
    2. "```json" opening marker: strip it and a trailing closing fence
    3. Otherwise a bare "```" opening marker: strip it and a trailing closing fence
    4. Strip any leftover leading/trailing backtick runs

    Args:
        text: Raw model output.

    Returns:
        Text with the wrapper removed. Clean text is returned unchanged.
    """
    cleaned = text.strip()

    if cleaned.startswith("```json"):
        cleaned = _FENCE_CLOSE.sub("", _JSON_FENCE_OPEN.sub("", cleaned))
    elif cleaned.startswith("```"):
        cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", cleaned))

    return _STRAY_BACKTICKS.sub("", cleaned)


def normalize_recipe_response(raw: Optional[str]) -> list[RecipeCandidate]:
    """Parse raw model output into recipe candidates (all-or-nothing).

    A single JSON object is accepted and wrapped into a one-element list.
    Every element must validate as RecipeCandidate (non-empty title,
    instructions and ingredients); one bad element rejects the whole batch.

    Args:
        raw: Raw text returned by the generative backend.

    Returns:
        list[RecipeCandidate]: One candidate per element, in order. Never empty.

    Raises:
        SchemaError: If the text is empty, is not JSON, is not an object/array,
            is an empty array, or any element fails validation.
    """
    if raw is None or not raw.strip():
        raise SchemaError("Empty response from recipe generator")

    cleaned = strip_code_fences(raw)
    logger.debug(f"Cleaned response preview: {cleaned[:100]}")

    try:
        parsed = json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        raise SchemaError(f"Response is not valid JSON: {e}") from e

    if isinstance(parsed, dict):
        parsed = [parsed]

    if not isinstance(parsed, list):
        raise SchemaError(f"Expected a JSON array of recipes, got {type(parsed).__name__}")
    if not parsed:
        raise SchemaError("Response contained no recipes")

    candidates = []
    for index, item in enumerate(parsed):
        if not isinstance(item, dict):
            raise SchemaError(f"Recipe {index + 1} is not a JSON object")
        try:
            candidates.append(RecipeCandidate.model_validate(item))
        except PydanticValidationError as e:
            raise SchemaError(
                f"Recipe {index + 1} failed validation ({e.error_count()} error(s)): {e.errors()[0]['msg']}"
            ) from e
        except OverflowError as e:
            raise SchemaError(f"Recipe {index + 1} has an out-of-range number: {e}") from e

    return candidates
