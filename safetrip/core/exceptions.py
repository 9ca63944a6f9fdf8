from fastapi import HTTPException, status


class BaseAppError(HTTPException):
    """Base class for all application exceptions."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "An unexpected error occurred"

    def __init__(self, detail: str = None):
        super().__init__(status_code=self.status_code, detail=detail or self.detail)


class NotFoundError(BaseAppError):
    """Resource not found error."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"


class ValidationError(BaseAppError):
    """Client-detected bad input. Raised before any remote call is made."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    detail = "Invalid input"


class PersistenceError(BaseAppError):
    """
    The remote service rejected or could not be reached for a mutating call.

    Local state is left as it was before the call; callers should offer a
    retry or reload to resynchronize.
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "Could not save changes, please refresh and try again"
    needs_refresh = True


class FetchError(BaseAppError):
    """A read (list or aggregate) call failed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Could not load data"


class UnauthorizedError(BaseAppError):
    """Missing or unusable session identity."""

    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Authentication failed"
