"""Generic CRUD request pipeline shared by every resource endpoint.

Each operation resolves the caller's credential, checks the declared
permission requirements, then validates params and body against their
schemas. Expected failures come back as a ``Rejected`` value; only
unexpected faults are raised.
"""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
import logging
from typing import Any

from fastapi import Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError

from app.core.errors import AuthenticationFailure
from app.core.errors import AuthorizationFailure
from app.core.errors import PipelineFailure
from app.core.errors import ValidationFailure
from app.core.errors import error_details
from app.core.errors import failure_for
from app.core.permissions import PermissionRequirement
from app.core.request import RequestData
from app.core.security import Credential
from app.core.security import CredentialResolutionError
from app.core.security import CredentialResolver
from app.core.security import PermissionChecker
from app.core.security import get_credential_resolver
from app.core.security import get_permission_checker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Validated:
    """Authorized request whose params and body passed their schemas."""

    credential: Credential
    params: Any = None
    body: Any = None


@dataclass(frozen=True)
class Rejected:
    """Request stopped by the pipeline before any business logic ran."""

    failure: PipelineFailure


ValidationOutcome = Validated | Rejected


def rejected_response(outcome: Rejected) -> JSONResponse:
    """Render a rejected outcome into the failure envelope."""
    return failure_for(outcome.failure)


class CrudPipeline:
    """Credential, permission and schema checks for one operation."""

    def __init__(
        self,
        permissions: Sequence[PermissionRequirement],
        *,
        credential_resolver: CredentialResolver,
        permission_checker: PermissionChecker,
    ) -> None:
        self.permissions = tuple(permissions)
        self._credential_resolver = credential_resolver
        self._permission_checker = permission_checker

    def create(self, request: RequestData, body_schema: type[BaseModel]) -> ValidationOutcome:
        return self._run(request, body_schema=body_schema)

    def read(
        self,
        request: RequestData,
        params_schema: type[BaseModel] | None = None,
    ) -> ValidationOutcome:
        # Collection reads carry their filters in the query string.
        params = {**request.query_params, **request.path_params}
        return self._run(request, params_schema=params_schema, params=params)

    def update(
        self,
        request: RequestData,
        params_schema: type[BaseModel],
        body_schema: type[BaseModel],
    ) -> ValidationOutcome:
        return self._run(request, params_schema=params_schema, body_schema=body_schema)

    def delete(self, request: RequestData, params_schema: type[BaseModel]) -> ValidationOutcome:
        return self._run(request, params_schema=params_schema)

    def _run(
        self,
        request: RequestData,
        *,
        params_schema: type[BaseModel] | None = None,
        body_schema: type[BaseModel] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> ValidationOutcome:
        try:
            credential = self._credential_resolver.resolve(request)
        except CredentialResolutionError as exc:
            return self._reject(AuthenticationFailure(message=str(exc) or "Unauthorized"))

        missing = self._permission_checker.missing(credential, self.permissions)
        if missing:
            return self._reject(AuthorizationFailure(missing=tuple(missing)))

        issues: list[dict[str, Any]] = []
        parsed_params = None
        parsed_body = None
        if params_schema is not None:
            source = request.path_params if params is None else params
            parsed_params = _parse(params_schema, source, issues)
        if body_schema is not None:
            parsed_body = _parse(body_schema, request.body, issues)

        if issues:
            return self._reject(ValidationFailure(details=tuple(error_details(issues))))

        return Validated(credential=credential, params=parsed_params, body=parsed_body)

    def _reject(self, failure: PipelineFailure) -> Rejected:
        logger.info(
            "Rejected %s request: %s",
            ",".join(str(item) for item in self.permissions),
            type(failure).__name__,
        )
        return Rejected(failure=failure)


def _parse(schema: type[BaseModel], data: Any, issues: list[dict[str, Any]]) -> BaseModel | None:
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        issues.extend(exc.errors(include_url=False, include_context=False))
        return None


def crud_pipeline(*permissions: PermissionRequirement) -> Callable[..., CrudPipeline]:
    """Build a FastAPI dependency yielding a pipeline for the given requirements."""

    def dependency(
        credential_resolver: CredentialResolver = Depends(get_credential_resolver),
        permission_checker: PermissionChecker = Depends(get_permission_checker),
    ) -> CrudPipeline:
        return CrudPipeline(
            permissions,
            credential_resolver=credential_resolver,
            permission_checker=permission_checker,
        )

    return dependency
