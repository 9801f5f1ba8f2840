"""Custom exceptions for metasearch."""


class MetaSearchError(Exception):
    """Base exception for all metasearch errors."""

    pass


class MalformedRequestError(MetaSearchError):
    """Search request is invalid and was rejected before reaching the store."""

    pass


class TooManyRequestsError(MetaSearchError):
    """All pooled store connections are in use."""

    def __init__(self, size: int):
        """Initialize exception with the pool size.

        Args:
            size: Number of connections the saturated pool holds.
        """
        self.size = size
        super().__init__(f"Too many concurrent requests: all {size} connections are in use")


class DatabaseError(MetaSearchError):
    """Database operation failed."""

    pass


class NotFoundError(MetaSearchError):
    """No subject matches the given identifiers."""

    pass


class AmbiguousMatchError(MetaSearchError):
    """More than one subject matches the given identifiers."""

    pass
