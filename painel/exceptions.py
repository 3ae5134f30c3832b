from typing import Optional


class PainelError(Exception):
    """Base class for errors surfaced to dashboard views."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ProviderUnavailable(PainelError):
    status_code = 503
    code = "provider_unavailable"


class InvalidCredentials(PainelError):
    status_code = 401
    code = "invalid_credentials"


class NotFound(PainelError):
    status_code = 404
    code = "not_found"


class PermissionDenied(PainelError):
    status_code = 403
    code = "permission_denied"


class ValidationFailed(PainelError):
    status_code = 422
    code = "validation_failed"


class RateLimited(PainelError):
    status_code = 429
    code = "rate_limited"

    def __init__(self, message: str = "", retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after
