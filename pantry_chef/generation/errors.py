"""Error taxonomy for the recipe generation pipeline.

Only ValidationError reaches callers. UpstreamError and SchemaError are
raised by the Gemini adapter and the response normalizer and recovered by
the pipeline, which degrades to fallback recipes.
"""


class RecipeGenerationError(Exception):
    """Base class for recipe generation failures."""


class ValidationError(RecipeGenerationError, ValueError):
    """The request cannot be served as given (e.g. no ingredients)."""


class UpstreamError(RecipeGenerationError):
    """The generative backend failed: network, auth, quota, timeout or empty reply."""


class SchemaError(RecipeGenerationError):
    """The generative backend replied with text that is not a valid recipe batch."""
