"""Exception types shared by the core, adapters and entry points."""


class EwpmError(Exception):
    """Base class for all EWPM errors."""

    pass


class ValidationError(EwpmError):
    """Raised when input fails a business rule. No mutation is performed."""

    pass


class InvalidTransitionError(ValidationError):
    """Raised when an assignment status change is not in the transition table."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Invalid status transition from {current} to {requested}")


class BackendError(EwpmError):
    """Raised when the managed backend rejects or fails a request."""

    def __init__(self, message: str, status_code: int | None = None, retryable: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class AuthenticationError(BackendError):
    """Raised when backend credentials are missing or rejected."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, status_code=status_code, retryable=False)


class EmailError(EwpmError):
    """Raised when the email API refuses a message."""

    pass
