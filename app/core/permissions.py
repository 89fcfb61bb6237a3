"""Permission requirement primitives shared by the pipeline and security layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Action(str, Enum):
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class PermissionRequirement:
    """A single (securable, action) pair an operation needs."""

    securable: str
    action: Action

    def __str__(self) -> str:
        return f"{self.securable}:{self.action.value}"
