"""
Error taxonomy for the recipe fetch pipeline.

Everything except PersistenceError propagates to the orchestrator, which turns
the message into the failure envelope. PersistenceError is only ever logged.
"""


class RecipeError(Exception):
    """Base class for pipeline errors."""


class ValidationError(RecipeError):
    """Bad or missing input: blank dish name, unknown source, malformed body."""


class ConfigurationError(RecipeError):
    """Upstream credentials are missing."""


class NotFoundError(RecipeError):
    """Upstream returned no matches."""


class UpstreamError(RecipeError):
    """Transport failure or unusable upstream response."""


class PersistenceError(RecipeError):
    """Repository write failed."""
