"""Task API routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.crud import CrudPipeline
from app.core.crud import Rejected
from app.core.crud import crud_pipeline
from app.core.crud import rejected_response
from app.core.errors import success_response
from app.core.permissions import Action
from app.core.permissions import PermissionRequirement
from app.core.request import RequestData
from app.core.request import get_request_data
from app.db.base import get_db_session
from app.db.procedures import ProcedureExecutor
from app.schemas.task import SECURABLE
from app.schemas.task import TaskCreate
from app.schemas.task import TaskIdParams
from app.schemas.task import TaskListQuery
from app.schemas.task import TaskUpdate
from app.services.tasks import create_task_service
from app.services.tasks import delete_task_service
from app.services.tasks import get_task_service
from app.services.tasks import list_tasks_service
from app.services.tasks import update_task_service

router = APIRouter(prefix="/api/v1/internal", tags=["task"])


def get_procedure_executor(session: Session = Depends(get_db_session)) -> ProcedureExecutor:
    """Bind a procedure executor to the request's session."""
    return ProcedureExecutor(session)


@router.post("/task", status_code=201)
def create_task_endpoint(
    request: RequestData = Depends(get_request_data),
    operation: CrudPipeline = Depends(crud_pipeline(PermissionRequirement(SECURABLE, Action.CREATE))),
    executor: ProcedureExecutor = Depends(get_procedure_executor),
) -> JSONResponse:
    """Create a task."""
    outcome = operation.create(request, TaskCreate)
    if isinstance(outcome, Rejected):
        return rejected_response(outcome)
    data = create_task_service(executor, outcome.credential, outcome.body)
    return success_response(data, status_code=201)


@router.get("/task")
def list_tasks_endpoint(
    request: RequestData = Depends(get_request_data),
    operation: CrudPipeline = Depends(crud_pipeline(PermissionRequirement(SECURABLE, Action.READ))),
    executor: ProcedureExecutor = Depends(get_procedure_executor),
) -> JSONResponse:
    """List tasks with optional status, priority and due-date filters."""
    outcome = operation.read(request, TaskListQuery)
    if isinstance(outcome, Rejected):
        return rejected_response(outcome)
    data = list_tasks_service(executor, outcome.credential, outcome.params)
    return success_response(data)


@router.get("/task/{id}")
def get_task_endpoint(
    request: RequestData = Depends(get_request_data),
    operation: CrudPipeline = Depends(crud_pipeline(PermissionRequirement(SECURABLE, Action.READ))),
    executor: ProcedureExecutor = Depends(get_procedure_executor),
) -> JSONResponse:
    """Get a task with its subtasks, tags and attachments."""
    outcome = operation.read(request, TaskIdParams)
    if isinstance(outcome, Rejected):
        return rejected_response(outcome)
    data = get_task_service(executor, outcome.credential, outcome.params.id)
    return success_response(data)


@router.put("/task/{id}")
def update_task_endpoint(
    request: RequestData = Depends(get_request_data),
    operation: CrudPipeline = Depends(crud_pipeline(PermissionRequirement(SECURABLE, Action.UPDATE))),
    executor: ProcedureExecutor = Depends(get_procedure_executor),
) -> JSONResponse:
    """Replace a task's mutable fields."""
    outcome = operation.update(request, TaskIdParams, TaskUpdate)
    if isinstance(outcome, Rejected):
        return rejected_response(outcome)
    data = update_task_service(executor, outcome.credential, outcome.params.id, outcome.body)
    return success_response(data)


@router.delete("/task/{id}")
def delete_task_endpoint(
    request: RequestData = Depends(get_request_data),
    operation: CrudPipeline = Depends(crud_pipeline(PermissionRequirement(SECURABLE, Action.DELETE))),
    executor: ProcedureExecutor = Depends(get_procedure_executor),
) -> JSONResponse:
    """Soft delete a task."""
    outcome = operation.delete(request, TaskIdParams)
    if isinstance(outcome, Rejected):
        return rejected_response(outcome)
    data = delete_task_service(executor, outcome.credential, outcome.params.id)
    return success_response(data)
