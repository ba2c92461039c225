"""Global error handling middleware for consistent error responses."""

import logging
import traceback
from typing import Any, Callable

from fastapi import HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from src.domain.errors import ClaimConflict, Forbidden, InvalidTransition, OrderWorkflowError
from src.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors.

    Raise subclasses to return a specific status code and message to the
    client.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type: str = "api_error",
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(message)


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(self, message: str = "Resource not found", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_type="not_found",
            details=details,
        )


class AuthorizationError(APIError):
    """Authorization failure error."""

    def __init__(self, message: str = "Access denied", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_type="authorization_error",
            details=details,
        )


class ConflictError(APIError):
    """The request conflicts with the resource's current state."""

    def __init__(
        self,
        message: str = "Conflict",
        error_type: str = "conflict",
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_type=error_type,
            details=details,
        )


def workflow_error_to_api_error(error: OrderWorkflowError) -> APIError:
    """Translate an order workflow failure into the error shown to clients.

    A lost claim reads as "order no longer available" so clients drop the
    order from their list instead of retrying the claim.
    """
    if isinstance(error, ClaimConflict):
        return ConflictError(message=error.message, error_type="order_unavailable")
    if isinstance(error, InvalidTransition):
        return ConflictError(
            message=error.message,
            error_type="invalid_transition",
            details=[{"loc": ["status"], "msg": f"{error.current} -> {error.target}", "type": "invalid_transition"}],
        )
    if isinstance(error, Forbidden):
        return AuthorizationError(message=error.message)
    return APIError(message=error.message, error_type="workflow_error")


def create_error_response(
    error_type: str,
    message: str,
    status_code: int,
    details: list[dict[str, Any]] | None = None,
    request_id: str | None = None,
) -> JSONResponse:
    """Create a standardized JSON error response."""
    error_response = ErrorResponse.from_exception(
        error_type=error_type,
        message=message,
        details=details,
        request_id=request_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
    )


async def error_handler_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Middleware to catch and format all exceptions.

    Logs full stack traces for unexpected errors while returning safe
    messages to clients.

    Args:
        request: The incoming request.
        call_next: Next middleware or route handler.

    Returns:
        Response: Either the successful response or formatted error response.
    """
    request_id = request.headers.get("X-Request-ID")

    try:
        return await call_next(request)

    except OrderWorkflowError as e:
        api_error = workflow_error_to_api_error(e)
        logger.info(
            "Order workflow rejected: %s - %s",
            api_error.error_type,
            api_error.message,
            extra={"request_id": request_id},
        )
        return create_error_response(
            error_type=api_error.error_type,
            message=api_error.message,
            status_code=api_error.status_code,
            details=api_error.details,
            request_id=request_id,
        )

    except APIError as e:
        logger.warning(
            "API error: %s - %s",
            e.error_type,
            e.message,
            extra={"request_id": request_id, "status_code": e.status_code},
        )
        return create_error_response(
            error_type=e.error_type,
            message=e.message,
            status_code=e.status_code,
            details=e.details,
            request_id=request_id,
        )

    except HTTPException as e:
        logger.warning(
            "HTTP exception: %s - %s",
            e.status_code,
            e.detail,
            extra={"request_id": request_id},
        )
        return create_error_response(
            error_type="http_error",
            message=str(e.detail),
            status_code=e.status_code,
            request_id=request_id,
        )

    except Exception as e:
        logger.error(
            "Unhandled exception: %s\n%s",
            str(e),
            traceback.format_exc(),
            extra={"request_id": request_id},
        )
        return create_error_response(
            error_type="internal_error",
            message="An unexpected error occurred",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            request_id=request_id,
        )
