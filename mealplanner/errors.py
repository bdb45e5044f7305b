"""
Error taxonomy for the engine.

Lower layers (fetcher, store) never swallow these; they surface at the
operation boundary (search, detail, random, generate) where the caller
decides how to message the user.
"""

from __future__ import annotations

from typing import Optional


class MealPlannerError(Exception):
    """Base class for all engine errors."""


class TransportError(MealPlannerError):
    """Network or HTTP failure talking to an external API. Never retried."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


# Older name kept for callers that think in terms of "the fetch failed"
FetchError = TransportError


class ParseError(MealPlannerError):
    """Response body could not be decoded into the expected shape."""


class StorageError(MealPlannerError):
    """A stored collection blob could not be decoded."""


class EmptyPlanError(MealPlannerError):
    """The meal plan has no assigned meals, so there is nothing to generate."""

    def __init__(self, period_id: str):
        super().__init__(f"No meals assigned for {period_id}")
        self.period_id = period_id


class ResolutionError(MealPlannerError):
    """A recipe in a generation batch could not be resolved to ingredients."""

    def __init__(self, recipe_id: int, reason: str = ""):
        message = f"Could not resolve recipe {recipe_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.recipe_id = recipe_id


class NotFoundError(MealPlannerError, ValueError):
    """A grocery list or item id does not exist."""
