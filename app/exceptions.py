"""Exceptions raised by the matching engine."""


class EmbeddingError(RuntimeError):
    """The embedding provider failed or returned an unusable vector."""


class SearchAuthorizationError(PermissionError):
    """The caller is not allowed to run a candidate search."""

    def __init__(self, message: str = "Unauthorized", status_code: int = 403):
        super().__init__(message)
        self.status_code = status_code


class SearchExecutionError(RuntimeError):
    """A search could not be completed (distinct from an empty result)."""
