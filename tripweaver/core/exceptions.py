"""HTTP exceptions raised by the API layer.

The itinerary pipeline itself never raises these; degraded provider
conditions are absorbed at the resolver boundary.
"""

from fastapi import HTTPException, status


class BadRequestError(HTTPException):
    """Raised for general bad request errors."""

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class NotFoundError(HTTPException):
    """Raised when a resource is not found."""

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )
