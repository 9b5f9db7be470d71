"""Custom exception hierarchy for the OpenHIM mediator."""


class MediatorError(Exception):
    """Base exception for all mediator errors."""


class ConfigurationError(MediatorError):
    """Raised when configuration is missing or invalid."""


class UpstreamError(MediatorError):
    """Raised when the upstream service could not be reached.

    Attributes:
        message: Transport failure description
        url: Upstream URL the request was sent to (optional)
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url


class UpstreamTimeoutError(UpstreamError):
    """Raised when the upstream request times out."""


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to the upstream service."""


class ControlPlaneError(MediatorError):
    """Raised when the OpenHIM core API rejects or fails a call.

    Attributes:
        message: Error message
        status_code: HTTP status code from the core API (optional)
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RegistrationError(ControlPlaneError):
    """Raised when the mediator could not register itself with OpenHIM."""
