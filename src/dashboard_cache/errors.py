"""Error types raised by the dashboard cache."""


class DashboardCacheError(Exception):
    """Base class for dashboard cache errors."""


class APIError(DashboardCacheError):
    """A failed call to the dashboard backend.

    Covers non-2xx responses, ``success: false`` envelopes, malformed
    bodies and transport failures. Transport failures carry status 0.

    Attributes:
        message: Human-readable error message
        status: HTTP status code, or 0 when no response was received
        endpoint: The backend endpoint that was called
    """

    def __init__(self, message: str, status: int, endpoint: str) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.endpoint = endpoint

    @property
    def is_client_error(self) -> bool:
        """True for 4xx responses, which are not worth retrying."""
        return 400 <= self.status < 500

    def __repr__(self) -> str:
        return f"APIError({self.message!r}, status={self.status}, endpoint={self.endpoint!r})"


class QueryCancelledError(DashboardCacheError):
    """The shared fetch a caller was waiting on was cancelled by a reset or clear."""
