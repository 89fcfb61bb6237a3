"""Named-procedure execution over a SQLAlchemy session.

Procedures are plain callables registered under a qualified name. Each one
receives the session plus its named parameters and returns a list of result
sets, where every result set is a list of row dicts. Callers only see the
``execute(name, params, expected)`` contract.
"""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from enum import Enum
import logging
from typing import Any

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

BUSINESS_RULE_ERROR_NUMBER = 51000
PROCEDURE_NOT_FOUND_NUMBER = 2812

Row = dict[str, Any]
ResultSets = list[list[Row]]
Procedure = Callable[..., ResultSets]

PROCEDURES: dict[str, Procedure] = {}


class ExpectedReturn(str, Enum):
    SINGLE = "single"
    MULTI = "multi"
    MULTI_SET = "multi_set"


class ProcedureError(Exception):
    """Error raised by a procedure, tagged with a numeric marker."""

    def __init__(self, number: int, message: str) -> None:
        super().__init__(message)
        self.number = number
        self.message = message

    @property
    def is_business_rule(self) -> bool:
        return self.number == BUSINESS_RULE_ERROR_NUMBER


class ProcedureShapeError(Exception):
    """Procedure output did not match the shape the caller expected."""


def business_rule(message: str) -> ProcedureError:
    """Build the error a procedure raises to reject well-formed input."""
    return ProcedureError(BUSINESS_RULE_ERROR_NUMBER, message)


def register_procedure(name: str) -> Callable[[Procedure], Procedure]:
    """Register a callable under a procedure name."""

    def decorator(func: Procedure) -> Procedure:
        if name in PROCEDURES:
            raise ValueError(f"Procedure {name!r} is already registered")
        PROCEDURES[name] = func
        return func

    return decorator


class ProcedureExecutor:
    """Run registered procedures inside one session, one transaction per call."""

    def __init__(self, session: Session, procedures: Mapping[str, Procedure] | None = None) -> None:
        self._session = session
        self._procedures = PROCEDURES if procedures is None else procedures

    def execute(
        self,
        name: str,
        params: Mapping[str, Any],
        expected: ExpectedReturn,
        result_set_names: Sequence[str] | None = None,
    ) -> Any:
        procedure = self._procedures.get(name)
        if procedure is None:
            raise ProcedureError(PROCEDURE_NOT_FOUND_NUMBER, f"Could not find procedure {name!r}")

        logger.debug("Executing procedure %s", name)
        try:
            result_sets = procedure(self._session, **params)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        return _shape(name, result_sets, expected, result_set_names)


def _shape(
    name: str,
    result_sets: ResultSets,
    expected: ExpectedReturn,
    result_set_names: Sequence[str] | None,
) -> Any:
    if expected == ExpectedReturn.MULTI_SET:
        if result_set_names is None:
            return list(result_sets)
        if len(result_set_names) != len(result_sets):
            raise ProcedureShapeError(
                f"{name} returned {len(result_sets)} result sets, expected {len(result_set_names)}"
            )
        return dict(zip(result_set_names, result_sets))

    rows = result_sets[0] if result_sets else []
    if expected == ExpectedReturn.MULTI:
        return rows
    if len(rows) != 1:
        raise ProcedureShapeError(f"{name} returned {len(rows)} rows, expected exactly one")
    return rows[0]
