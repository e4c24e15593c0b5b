"""Errors raised by the review engine."""


class ReviewError(Exception):
    """Base class for every error the engine reports to its callers."""


class NotAuthenticated(ReviewError):
    """No signed-in user could be resolved. Never retried automatically."""


class InvalidOutcome(ReviewError, ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Invalid result {value!r}. Must be FAILED, STRUGGLED, SOLVED, or INSTANT"
        )


class InvalidSettings(ReviewError, ValueError):
    """A settings update was empty or out of bounds."""


class ProblemNotFound(ReviewError, LookupError):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Problem not found: {slug}")


class ImportFormatError(ReviewError, ValueError):
    """An export file matched none of the known layouts."""


class RepositoryUnavailable(ReviewError):
    """Storage fault or timeout. Safe to retry the whole operation."""
