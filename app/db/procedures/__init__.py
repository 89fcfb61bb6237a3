"""Procedure registry and executor; importing this package registers every procedure."""

from app.db.procedures.executor import BUSINESS_RULE_ERROR_NUMBER
from app.db.procedures.executor import ExpectedReturn
from app.db.procedures.executor import ProcedureError
from app.db.procedures.executor import ProcedureExecutor
from app.db.procedures.executor import ProcedureShapeError
from app.db.procedures import task as _task  # noqa: F401

__all__ = [
    "BUSINESS_RULE_ERROR_NUMBER",
    "ExpectedReturn",
    "ProcedureError",
    "ProcedureExecutor",
    "ProcedureShapeError",
]
