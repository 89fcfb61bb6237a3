"""Credential resolution and permission checking capabilities.

Both are expressed as protocols and handed to the CRUD pipeline through
FastAPI dependencies, so a real authentication backend can replace the
defaults by overriding ``get_credential_resolver`` or
``get_permission_checker``.
"""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from app.core.config import get_settings
from app.core.permissions import PermissionRequirement
from app.core.request import RequestData

ACCOUNT_HEADER = "x-account-id"
USER_HEADER = "x-user-id"


@dataclass(frozen=True)
class Credential:
    """Resolved caller identity scoped to an account and a user."""

    id_account: int
    id_user: int

    def __post_init__(self) -> None:
        if self.id_account <= 0 or self.id_user <= 0:
            raise ValueError("Credential identifiers must be positive integers")


class CredentialResolutionError(Exception):
    """Raised when no caller identity can be established for a request."""


class CredentialResolver(Protocol):
    def resolve(self, request: RequestData) -> Credential: ...


class PermissionChecker(Protocol):
    def missing(
        self,
        credential: Credential,
        requirements: Sequence[PermissionRequirement],
    ) -> list[PermissionRequirement]: ...


class StaticCredentialResolver:
    """Resolve every request to the same configured identity."""

    def __init__(self, *, id_account: int, id_user: int) -> None:
        self._credential = Credential(id_account=id_account, id_user=id_user)

    def resolve(self, request: RequestData) -> Credential:
        return self._credential


class HeaderCredentialResolver:
    """Resolve the caller identity from ``X-Account-Id`` and ``X-User-Id`` headers."""

    def resolve(self, request: RequestData) -> Credential:
        id_account = _positive_int_header(request, ACCOUNT_HEADER)
        id_user = _positive_int_header(request, USER_HEADER)
        return Credential(id_account=id_account, id_user=id_user)


def _positive_int_header(request: RequestData, name: str) -> int:
    raw = request.headers.get(name)
    if raw is None:
        raise CredentialResolutionError(f"Missing {name} header")
    try:
        value = int(raw)
    except ValueError:
        raise CredentialResolutionError(f"Header {name} must be an integer") from None
    if value <= 0:
        raise CredentialResolutionError(f"Header {name} must be positive")
    return value


class GrantPermissionChecker:
    """Check requirements against a fixed set of granted permissions."""

    def __init__(self, grants: Iterable[PermissionRequirement]) -> None:
        self._grants = frozenset(grants)

    def missing(
        self,
        credential: Credential,
        requirements: Sequence[PermissionRequirement],
    ) -> list[PermissionRequirement]:
        return [requirement for requirement in requirements if requirement not in self._grants]


def get_credential_resolver() -> CredentialResolver:
    """Build the configured credential resolver."""
    settings = get_settings()
    if settings.credential_mode == "header":
        return HeaderCredentialResolver()
    return StaticCredentialResolver(
        id_account=settings.default_account_id,
        id_user=settings.default_user_id,
    )


def get_permission_checker() -> PermissionChecker:
    """Build the configured permission checker."""
    return GrantPermissionChecker(get_settings().permission_grants)
