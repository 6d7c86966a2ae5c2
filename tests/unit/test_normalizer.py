"""Unit tests for response normalization.

Tests cover:
- Markdown fence removal
- Single object wrapping
- All-or-nothing validation of recipe batches
"""

import json

import pytest

from pantry_chef.generation.errors import SchemaError
from pantry_chef.generation.normalizer import normalize_recipe_response, strip_code_fences


def recipe_dict(title="Tomato Basil Pasta", **overrides):
    data = {
        "title": title,
        "description": "Fresh and quick.",
        "ingredients": [
            {"name": "pasta", "amount": "200", "unit": "g"},
            {"name": "tomato", "amount": 2, "unit": "whole"},
            {"name": "basil", "amount": "a handful"},
        ],
        "instructions": ["Boil the pasta", "Chop tomatoes", "Toss everything with basil"],
        "prep_time": 10,
        "cook_time": 12,
        "servings": 2,
        "difficulty": "easy",
        "cuisine_type": "Italian",
    }
    data.update(overrides)
    return data


class TestStripCodeFences:
    """Test fence removal."""

    def test_clean_text_unchanged(self):
        assert strip_code_fences('[{"a": 1}]') == '[{"a": 1}]'

    def test_json_fence(self):
        assert strip_code_fences('```json\n[{"a": 1}]\n```') == '[{"a": 1}]'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_surrounding_whitespace(self):
        assert strip_code_fences('  \n```json\n[]\n```  \n') == "[]"

    def test_stray_backticks(self):
        assert strip_code_fences('`[1, 2]`') == "[1, 2]"


class TestNormalizeRecipeResponse:
    """Test parsing and validation of model output."""

    def test_array_of_recipes(self):
        raw = json.dumps([recipe_dict("A"), recipe_dict("B"), recipe_dict("C")])

        candidates = normalize_recipe_response(raw)

        assert [candidate.title for candidate in candidates] == ["A", "B", "C"]
        assert candidates[0].ingredients[1].amount == "2"
        assert candidates[0].ingredients[2].unit is None

    def test_fenced_array(self):
        raw = "```json\n" + json.dumps([recipe_dict()]) + "\n```"

        candidates = normalize_recipe_response(raw)

        assert len(candidates) == 1
        assert candidates[0].cuisine_type == "Italian"

    def test_single_object_wrapped(self):
        candidates = normalize_recipe_response(json.dumps(recipe_dict("Solo")))

        assert len(candidates) == 1
        assert candidates[0].title == "Solo"

    def test_lenient_coercion(self):
        raw = json.dumps([recipe_dict(prep_time="15 minutes", difficulty="Medium", servings=None)])

        candidate = normalize_recipe_response(raw)[0]

        assert candidate.prep_time == 15
        assert candidate.difficulty == "medium"
        assert candidate.servings == 1

    @pytest.mark.parametrize("raw", [None, "", "   \n  "])
    def test_empty_response(self, raw):
        with pytest.raises(SchemaError, match="Empty"):
            normalize_recipe_response(raw)

    @pytest.mark.parametrize("raw", ["Here are some recipes!", '[{"title": "Cut off', "```json\n{oops}\n```"])
    def test_invalid_json(self, raw):
        with pytest.raises(SchemaError, match="not valid JSON"):
            normalize_recipe_response(raw)

    @pytest.mark.parametrize("raw", ['"a string"', "42", "null", "true"])
    def test_non_container_json(self, raw):
        with pytest.raises(SchemaError, match="Expected a JSON array"):
            normalize_recipe_response(raw)

    def test_empty_array(self):
        with pytest.raises(SchemaError, match="no recipes"):
            normalize_recipe_response("[]")

    def test_non_object_element(self):
        raw = json.dumps([recipe_dict(), "not a recipe"])
        with pytest.raises(SchemaError, match="Recipe 2 is not a JSON object"):
            normalize_recipe_response(raw)

    @pytest.mark.parametrize(
        "bad",
        [
            {"title": ""},
            {"instructions": []},
            {"ingredients": []},
            {"servings": -1},
        ],
    )
    def test_one_invalid_element_rejects_batch(self, bad):
        raw = json.dumps([recipe_dict("Good"), recipe_dict(**bad)])

        with pytest.raises(SchemaError, match="Recipe 2 failed validation"):
            normalize_recipe_response(raw)

    def test_missing_title_rejected(self):
        data = recipe_dict()
        del data["title"]

        with pytest.raises(SchemaError):
            normalize_recipe_response(json.dumps([data]))

    def test_deeply_nested_input_is_schema_error(self):
        with pytest.raises(SchemaError):
            normalize_recipe_response("[" * 100000 + "]" * 100000)

    def test_validation_error_is_chained(self):
        with pytest.raises(SchemaError) as exc_info:
            normalize_recipe_response(json.dumps([recipe_dict(title="")]))
        assert exc_info.value.__cause__ is not None

    def test_fenced_equals_unwrapped(self):
        clean = json.dumps([recipe_dict("A"), recipe_dict("B")])

        assert normalize_recipe_response("```json\n" + clean + "\n```") == normalize_recipe_response(clean)
        assert normalize_recipe_response("```\n" + clean + "\n```") == normalize_recipe_response(clean)

    def test_clean_json_is_stable(self):
        clean = json.dumps([recipe_dict()])
        first = normalize_recipe_response(clean)

        again = normalize_recipe_response(json.dumps([candidate.model_dump() for candidate in first]))

        assert again == first

    @pytest.mark.parametrize(
        "field, literal",
        [
            ("prep_time", "Infinity"),
            ("prep_time", "-Infinity"),
            ("cook_time", "1e999"),
            ("servings", "1e999"),
            ("cook_time", "NaN"),
            ("prep_time", '"' + "9" * 400 + ' minutes"'),
        ],
    )
    def test_non_finite_numbers_are_schema_errors(self, field, literal):
        raw = json.dumps([recipe_dict(**{field: 0})]).replace(f'"{field}": 0', f'"{field}": {literal}')

        with pytest.raises(SchemaError, match="Recipe 1"):
            normalize_recipe_response(raw)
