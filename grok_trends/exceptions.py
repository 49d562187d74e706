"""Errors raised by the Grok Trends pipeline."""


class TrendsError(Exception):
    """Base class for pipeline errors."""


class InvalidStatusError(TrendsError, ValueError):
    """A status value outside the story status enumeration."""


class InvalidCategoryError(TrendsError, ValueError):
    """A category value outside the story category enumeration."""


class InvalidTransitionError(TrendsError, ValueError):
    """A status change the lifecycle does not allow."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move story from '{current}' to '{requested}'")


class StoryNotFoundError(TrendsError, LookupError):
    """No story document with the given id."""

    def __init__(self, story_id: str):
        self.story_id = story_id
        super().__init__(f"Story not found: {story_id}")


class CompletionError(TrendsError):
    """The external completion endpoint failed or answered in an unexpected shape."""


class DraftGenerationError(TrendsError):
    """The model answer could not be turned into a usable draft."""


class PublishValidationError(TrendsError, ValueError):
    """Title, content or excerpt could not be resolved for publishing."""
