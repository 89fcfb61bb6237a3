"""Pydantic schemas for task API payloads."""

from __future__ import annotations

from datetime import date
from datetime import datetime
from datetime import time

from pydantic import model_validator

from app.schemas.fields import CamelModel
from app.schemas.fields import CategoryRef
from app.schemas.fields import Description
from app.schemas.fields import DueDate
from app.schemas.fields import DueTime
from app.schemas.fields import EstimatedMinutes
from app.schemas.fields import Identifier
from app.schemas.fields import Priority
from app.schemas.fields import PriorityFilter
from app.schemas.fields import Status
from app.schemas.fields import StatusFilter
from app.schemas.fields import Title

SECURABLE = "TASK"


class TaskCreate(CamelModel):
    """Payload to create a task."""

    title: Title
    description: Description | None = None
    due_date: DueDate | None = None
    due_time: DueTime | None = None
    priority: Priority | None = None
    id_category: CategoryRef | None = None
    estimated_time: EstimatedMinutes | None = None


class TaskUpdate(CamelModel):
    """Payload replacing every mutable task field."""

    title: Title
    description: Description | None = None
    due_date: DueDate | None = None
    due_time: DueTime | None = None
    priority: Priority
    status: Status
    id_category: CategoryRef | None = None
    estimated_time: EstimatedMinutes | None = None


class TaskListQuery(CamelModel):
    """Optional, conjunctive list filters."""

    status: StatusFilter | None = None
    priority: PriorityFilter | None = None
    due_date_from: date | None = None
    due_date_to: date | None = None

    @model_validator(mode="after")
    def _check_date_range(self) -> TaskListQuery:
        if (
            self.due_date_from is not None
            and self.due_date_to is not None
            and self.due_date_from > self.due_date_to
        ):
            raise ValueError("dueDateFrom must not be after dueDateTo")
        return self


class TaskIdParams(CamelModel):
    id: Identifier


class TaskCreateResult(CamelModel):
    id_task: int


class OperationResult(CamelModel):
    success: bool


class TaskSummary(CamelModel):
    """Task list item."""

    id_task: int
    title: str
    description: str
    due_date: date | None = None
    due_time: time | None = None
    priority: int
    status: int
    id_category: int | None = None
    estimated_time: int | None = None
    subtask_count: int
    completed_subtask_count: int
    attachment_count: int
    date_created: datetime
    date_modified: datetime


class TaskDetail(CamelModel):
    id_task: int
    title: str
    description: str
    due_date: date | None = None
    due_time: time | None = None
    priority: int
    status: int
    id_category: int | None = None
    estimated_time: int | None = None
    date_created: datetime
    date_modified: datetime


class Subtask(CamelModel):
    id_subtask: int
    title: str
    completed: bool
    date_created: datetime


class Tag(CamelModel):
    tag: str


class Attachment(CamelModel):
    id_attachment: int
    file_name: str
    file_type: str
    file_size: int
    date_created: datetime


class TaskGetResult(CamelModel):
    """Task detail with its related collections."""

    task: TaskDetail
    subtasks: list[Subtask]
    tags: list[Tag]
    attachments: list[Attachment]
