"""Prompts for recipe generation.

Provides the system instructions sent with every generation call and a
factory that renders the user prompt from a GenerationRequest. Rendering is
a pure function of its input: same request, same prompt.
"""

from pantry_chef.models.models import GenerationRequest


SYSTEM_INSTRUCTIONS = (
    "You are a professional chef and recipe creator. Always respond with valid JSON arrays "
    "containing recipe objects. Be precise with measurements and realistic with cooking times. "
    "IMPORTANT: Return ONLY the JSON array, no markdown formatting, no code blocks, "
    "no backticks, no additional text."
)

ONLY_LISTED_INGREDIENTS = (
    "You must ONLY use the ingredients listed above. Do not suggest any additional ingredients."
)

ADDITIONAL_INGREDIENTS_ALLOWED = (
    "You may suggest additional essential ingredients if absolutely necessary, "
    'but clearly mark them as "ADDITIONAL NEEDED".'
)

OUTPUT_CONTRACT = """Format your response as a JSON array with the following structure. DO NOT wrap the JSON in markdown code blocks or backticks:
[
  {
    "title": "Recipe Name",
    "description": "Brief description",
    "ingredients": [
      {"name": "ingredient name", "amount": "quantity", "unit": "measurement unit"}
    ],
    "instructions": ["Step 1", "Step 2", "Step 3"],
    "prep_time": minutes,
    "cook_time": minutes,
    "servings": number,
    "difficulty": "easy|medium|hard",
    "cuisine_type": "cuisine name"
  }
]

IMPORTANT: Return ONLY the JSON array, no additional text, no markdown formatting, no code block backticks."""

GUIDELINES = """Important guidelines:
- Be realistic about quantities and measurements
- Provide clear, actionable cooking steps
- Do not hallucinate ingredients not provided
- Ensure recipes are actually cookable with the given ingredients
- If additional ingredients are absolutely essential, clearly mark them
- Focus on practical, achievable recipes"""


def _preference_lines(request: GenerationRequest) -> list[str]:
    """Render one labeled line per present preference field, nothing for absent ones."""
    preferences = request.preferences
    if preferences is None:
        return []

    lines = []
    if preferences.dietary_restrictions:
        lines.append(f"- Dietary restrictions: {', '.join(preferences.dietary_restrictions)}")
    if preferences.preferred_cuisines:
        lines.append(f"- Preferred cuisines: {', '.join(preferences.preferred_cuisines)}")
    if preferences.spice_level:
        lines.append(f"- Spice level: {preferences.spice_level}")
    if preferences.cooking_time_preference:
        lines.append(f"- Cooking time preference: {preferences.cooking_time_preference}")
    return lines


def build_recipe_prompt(request: GenerationRequest, min_recipes: int = 3, max_recipes: int = 5) -> str:
    """Build the user prompt for a recipe generation request.

    Sections, in order:
    - persona and the comma-joined ingredient list
    - the ingredient policy (only listed ingredients, or flagged additions)
    - "User preferences:" followed by one line per present preference (omitted when none)
    - the requested recipe count and fields
    - the JSON output contract and guidelines

    Args:
        request: Generation request with ingredients and optional preferences.
        min_recipes: Lower bound of recipes to ask for (default: 3).
        max_recipes: Upper bound of recipes to ask for (default: 5).

    Returns:
        str: Prompt text, identical for identical requests.
    """
    sections = [
        "Act as a professional chef who only suggests recipes using ingredients available at hand "
        "unless given permission to include others.",
        f"Available ingredients: {', '.join(request.ingredients)}",
        ADDITIONAL_INGREDIENTS_ALLOWED if request.allow_additional_ingredients else ONLY_LISTED_INGREDIENTS,
    ]

    preference_lines = _preference_lines(request)
    if preference_lines:
        sections.append("User preferences:\n" + "\n".join(preference_lines))

    recipe_count = f"{min_recipes}-{max_recipes}" if min_recipes != max_recipes else str(min_recipes)
    sections.append(
        f"Please provide {recipe_count} complete recipes that can be made with these ingredients. "
        "For each recipe, provide:\n\n"
        "1. Recipe title\n"
        "2. Brief description (1-2 sentences)\n"
        "3. Complete ingredients list with exact amounts\n"
        "4. Step-by-step cooking instructions\n"
        "5. Preparation time in minutes\n"
        "6. Cooking time in minutes\n"
        "7. Number of servings\n"
        "8. Difficulty level (easy/medium/hard)\n"
        "9. Cuisine type"
    )
    sections.append(OUTPUT_CONTRACT)
    sections.append(GUIDELINES)

    return "\n\n".join(sections)
