"""Service helpers for task API operations.

Each operation makes exactly one procedure call scoped by the caller's
credential. Business-rule rejections from the data layer become
``BusinessRuleError``; every other data-layer failure becomes an opaque
``InfrastructureError``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging

from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import BusinessRuleError
from app.core.errors import InfrastructureError
from app.core.security import Credential
from app.db.procedures import ExpectedReturn
from app.db.procedures import ProcedureError
from app.db.procedures import ProcedureExecutor
from app.db.procedures import ProcedureShapeError
from app.db.procedures.task import TASK_CREATE
from app.db.procedures.task import TASK_DELETE
from app.db.procedures.task import TASK_GET
from app.db.procedures.task import TASK_LIST
from app.db.procedures.task import TASK_UPDATE
from app.schemas.task import OperationResult
from app.schemas.task import TaskCreate
from app.schemas.task import TaskCreateResult
from app.schemas.task import TaskGetResult
from app.schemas.task import TaskListQuery
from app.schemas.task import TaskSummary
from app.schemas.task import TaskUpdate

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 1
TASK_RESULT_SETS = ("task", "subtasks", "tags", "attachments")


@contextmanager
def _translate_errors(procedure: str) -> Iterator[None]:
    try:
        yield
    except ProcedureError as exc:
        if exc.is_business_rule:
            raise BusinessRuleError(exc.message) from exc
        logger.exception("Procedure %s failed with error %s", procedure, exc.number)
        raise InfrastructureError() from exc
    except (ProcedureShapeError, SQLAlchemyError) as exc:
        logger.exception("Procedure %s failed", procedure)
        raise InfrastructureError() from exc


def _scope(credential: Credential) -> dict[str, int]:
    return {"id_account": credential.id_account, "id_user": credential.id_user}


def create_task_service(
    executor: ProcedureExecutor,
    credential: Credential,
    payload: TaskCreate,
) -> TaskCreateResult:
    """Create a task and return its identifier."""
    with _translate_errors(TASK_CREATE):
        row = executor.execute(
            TASK_CREATE,
            {
                **_scope(credential),
                "title": payload.title,
                "description": payload.description or "",
                "due_date": payload.due_date,
                "due_time": payload.due_time,
                "priority": DEFAULT_PRIORITY if payload.priority is None else payload.priority,
                "id_category": payload.id_category,
                "estimated_time": payload.estimated_time,
            },
            ExpectedReturn.SINGLE,
        )
    result = TaskCreateResult.model_validate(row)
    logger.info("Created task %s for account %s", result.id_task, credential.id_account)
    return result


def list_tasks_service(
    executor: ProcedureExecutor,
    credential: Credential,
    filters: TaskListQuery | None = None,
) -> list[TaskSummary]:
    """List the caller's tasks matching every supplied filter."""
    filters = filters or TaskListQuery()
    with _translate_errors(TASK_LIST):
        rows = executor.execute(
            TASK_LIST,
            {
                **_scope(credential),
                "status": filters.status,
                "priority": filters.priority,
                "due_date_from": filters.due_date_from,
                "due_date_to": filters.due_date_to,
            },
            ExpectedReturn.MULTI,
        )
    return [TaskSummary.model_validate(row) for row in rows]


def get_task_service(executor: ProcedureExecutor, credential: Credential, id_task: int) -> TaskGetResult:
    """Fetch a task with its subtasks, tags and attachments."""
    with _translate_errors(TASK_GET):
        result = executor.execute(
            TASK_GET,
            {**_scope(credential), "id_task": id_task},
            ExpectedReturn.MULTI_SET,
            TASK_RESULT_SETS,
        )
    if not result["task"]:
        raise BusinessRuleError("Task not found")
    return TaskGetResult.model_validate(
        {
            "task": result["task"][0],
            "subtasks": result["subtasks"],
            "tags": result["tags"],
            "attachments": result["attachments"],
        }
    )


def update_task_service(
    executor: ProcedureExecutor,
    credential: Credential,
    id_task: int,
    payload: TaskUpdate,
) -> OperationResult:
    """Replace every mutable field of a task; omitted optionals are cleared."""
    with _translate_errors(TASK_UPDATE):
        row = executor.execute(
            TASK_UPDATE,
            {
                **_scope(credential),
                "id_task": id_task,
                "title": payload.title,
                "description": payload.description or "",
                "due_date": payload.due_date,
                "due_time": payload.due_time,
                "priority": payload.priority,
                "status": payload.status,
                "id_category": payload.id_category,
                "estimated_time": payload.estimated_time,
            },
            ExpectedReturn.SINGLE,
        )
    logger.info("Updated task %s for account %s", id_task, credential.id_account)
    return OperationResult.model_validate(row)


def delete_task_service(executor: ProcedureExecutor, credential: Credential, id_task: int) -> OperationResult:
    """Soft delete a task."""
    with _translate_errors(TASK_DELETE):
        row = executor.execute(
            TASK_DELETE,
            {**_scope(credential), "id_task": id_task},
            ExpectedReturn.SINGLE,
        )
    logger.info("Deleted task %s for account %s", id_task, credential.id_account)
    return OperationResult.model_validate(row)
