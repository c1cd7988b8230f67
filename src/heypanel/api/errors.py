"""Custom API client exceptions."""


class PanelError(Exception):
    """Base exception for remote API errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class AuthenticationMissing(PanelError):
    """Raised before any network call when no credential is available.

    This typically occurs when:
    - The panel has not been unlocked yet
    - A previous 401 response invalidated the stored credential
    """

    pass


class RemoteApiError(PanelError):
    """Exception raised when the remote API answers with a non-2xx status.

    The message is taken from the error body where possible.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status = status


class CredentialRejected(RemoteApiError):
    """The remote API rejected the credential (HTTP 401).

    The credential has already been cleared when this is raised.
    """

    pass


class TransportError(PanelError):
    """Network failure below the HTTP layer (DNS, connect, timeout)."""

    pass


class MalformedResponse(PanelError):
    """A 2xx response whose body could not be parsed as JSON."""

    pass
