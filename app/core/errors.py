"""Error taxonomy, failure envelope rendering and exception handler registration."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
import logging
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.permissions import PermissionRequirement
from app.schemas.envelope import ErrorDetail
from app.schemas.envelope import ErrorObject
from app.schemas.envelope import FailureEnvelope
from app.schemas.envelope import SuccessEnvelope

logger = logging.getLogger(__name__)

GENERAL_ERROR_STATUS = status.HTTP_500_INTERNAL_SERVER_ERROR
GENERAL_ERROR_CODE = "internal_error"
GENERAL_ERROR_MESSAGE = "An unexpected error occurred"


class APIError(Exception):
    """Base application exception for explicit API error responses."""

    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Sequence[ErrorDetail] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = list(details) if details else None


class BusinessRuleError(APIError):
    """Well-formed input rejected by a rule the data layer enforces."""

    def __init__(self, message: str) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="business_rule_violation",
            message=message,
        )


class InfrastructureError(APIError):
    """Any data-layer failure that is not a business rule.

    The response never carries the underlying diagnostic; chain the cause
    with ``raise ... from exc`` so it reaches the logs instead.
    """

    def __init__(self) -> None:
        super().__init__(
            status_code=GENERAL_ERROR_STATUS,
            code=GENERAL_ERROR_CODE,
            message=GENERAL_ERROR_MESSAGE,
        )


@dataclass(frozen=True)
class ValidationFailure:
    """Request params or body did not satisfy the declared schema."""

    details: tuple[ErrorDetail, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AuthorizationFailure:
    """The caller lacks one or more declared permissions."""

    missing: tuple[PermissionRequirement, ...]


@dataclass(frozen=True)
class AuthenticationFailure:
    """No caller identity could be resolved."""

    message: str


PipelineFailure = ValidationFailure | AuthorizationFailure | AuthenticationFailure


def success_response(data: Any, *, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Wrap a resource payload in the success envelope."""
    payload = SuccessEnvelope(data=jsonable_encoder(data, by_alias=True))
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))


def failure_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: Sequence[ErrorDetail] | None = None,
) -> JSONResponse:
    """Wrap an error in the failure envelope."""
    payload = FailureEnvelope(
        error=ErrorObject(code=code, message=message, details=list(details) if details else None)
    )
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json", exclude_none=True))


def failure_for(failure: PipelineFailure) -> JSONResponse:
    """Render a pipeline failure with the status its kind maps to."""
    if isinstance(failure, ValidationFailure):
        return failure_response(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="validation_error",
            message="Request validation failed",
            details=failure.details,
        )
    if isinstance(failure, AuthorizationFailure):
        return failure_response(
            status_code=status.HTTP_403_FORBIDDEN,
            code="forbidden",
            message="Missing permission",
            details=[ErrorDetail(field="permission", issue=str(item)) for item in failure.missing],
        )
    if isinstance(failure, AuthenticationFailure):
        return failure_response(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="unauthorized",
            message=failure.message,
        )
    raise TypeError(f"Unhandled pipeline failure: {failure!r}")


def _http_error_code(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "validation_error"
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return "unauthorized"
    if status_code == status.HTTP_403_FORBIDDEN:
        return "forbidden"
    if status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return "method_not_allowed"
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return GENERAL_ERROR_CODE
    return "bad_request"


def error_details(issues: Iterable[dict[str, Any]]) -> list[ErrorDetail]:
    """Flatten pydantic/FastAPI error dicts into field-level details."""
    details: list[ErrorDetail] = []
    for issue in issues:
        location = issue.get("loc", ())
        details.append(
            ErrorDetail(
                field=_format_location(location),
                issue=str(issue.get("msg", "Invalid value")),
            )
        )
    return details


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    prefixes = {"body", "query", "path", "header", "cookie"}
    filtered = [str(part) for part in location if part not in prefixes]
    if filtered:
        return ".".join(filtered)

    if not location:
        return "request"

    return str(location[0])


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI validation errors to the failure envelope."""

    return failure_for(ValidationFailure(details=tuple(error_details(exc.errors()))))


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Normalize routing and HTTP exceptions to the failure envelope."""

    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        message = GENERAL_ERROR_MESSAGE
    elif isinstance(exc.detail, str) and exc.detail:
        message = exc.detail
    else:
        message = "Request failed"
    return failure_response(
        status_code=exc.status_code,
        code=_http_error_code(exc.status_code),
        message=message,
    )


async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
    """Return explicit domain errors in the shared envelope."""

    return failure_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Avoid leaking internal exceptions while keeping response shape stable."""

    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return failure_response(
        status_code=GENERAL_ERROR_STATUS,
        code=GENERAL_ERROR_CODE,
        message=GENERAL_ERROR_MESSAGE,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach all error handlers to a FastAPI app instance."""

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
