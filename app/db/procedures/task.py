"""Task procedures: create, list, get, update and soft delete."""

from __future__ import annotations

from datetime import date
from datetime import time

from sqlalchemy.orm import Session

from app.db.models.task import Attachment
from app.db.models.task import Subtask
from app.db.models.task import Task
from app.db.models.task import TaskTag
from app.db.procedures.executor import ResultSets
from app.db.procedures.executor import Row
from app.db.procedures.executor import business_rule
from app.db.procedures.executor import register_procedure
from app.db.repository.tasks import create_task
from app.db.repository.tasks import get_active_category
from app.db.repository.tasks import get_owned_task
from app.db.repository.tasks import list_attachments
from app.db.repository.tasks import list_subtasks
from app.db.repository.tasks import list_tags
from app.db.repository.tasks import list_tasks
from app.db.repository.tasks import replace_task
from app.db.repository.tasks import soft_delete_task

TASK_CREATE = "functional.spTaskCreate"
TASK_LIST = "functional.spTaskList"
TASK_GET = "functional.spTaskGet"
TASK_UPDATE = "functional.spTaskUpdate"
TASK_DELETE = "functional.spTaskDelete"


def _task_row(task: Task) -> Row:
    return {
        "id_task": task.id,
        "title": task.title,
        "description": task.description,
        "due_date": task.due_date,
        "due_time": task.due_time,
        "priority": task.priority,
        "status": task.status,
        "id_category": task.id_category,
        "estimated_time": task.estimated_time,
        "date_created": task.date_created,
        "date_modified": task.date_modified,
    }


def _subtask_row(subtask: Subtask) -> Row:
    return {
        "id_subtask": subtask.id,
        "title": subtask.title,
        "completed": subtask.completed,
        "date_created": subtask.date_created,
    }


def _tag_row(tag: TaskTag) -> Row:
    return {"tag": tag.tag}


def _attachment_row(attachment: Attachment) -> Row:
    return {
        "id_attachment": attachment.id,
        "file_name": attachment.file_name,
        "file_type": attachment.file_type,
        "file_size": attachment.file_size,
        "date_created": attachment.date_created,
    }


def _require_category(session: Session, *, id_account: int, id_category: int | None) -> None:
    if id_category is None:
        return
    if get_active_category(session, id_account=id_account, id_category=id_category) is None:
        raise business_rule("Category does not exist")


def _require_task(session: Session, *, id_account: int, id_user: int, id_task: int) -> Task:
    task = get_owned_task(session, id_account=id_account, id_user=id_user, id_task=id_task)
    if task is None:
        raise business_rule("Task does not exist")
    return task


@register_procedure(TASK_CREATE)
def task_create(
    session: Session,
    *,
    id_account: int,
    id_user: int,
    title: str,
    description: str,
    due_date: date | None,
    due_time: time | None,
    priority: int,
    id_category: int | None,
    estimated_time: int | None,
) -> ResultSets:
    _require_category(session, id_account=id_account, id_category=id_category)
    task = create_task(
        session,
        id_account=id_account,
        id_user=id_user,
        title=title,
        description=description,
        due_date=due_date,
        due_time=due_time,
        priority=priority,
        id_category=id_category,
        estimated_time=estimated_time,
    )
    return [[{"id_task": task.id}]]


@register_procedure(TASK_LIST)
def task_list(
    session: Session,
    *,
    id_account: int,
    id_user: int,
    status: int | None,
    priority: int | None,
    due_date_from: date | None,
    due_date_to: date | None,
) -> ResultSets:
    rows = list_tasks(
        session,
        id_account=id_account,
        id_user=id_user,
        status=status,
        priority=priority,
        due_date_from=due_date_from,
        due_date_to=due_date_to,
    )
    return [
        [
            {
                **_task_row(row.Task),
                "subtask_count": row.subtask_count,
                "completed_subtask_count": row.completed_subtask_count,
                "attachment_count": row.attachment_count,
            }
            for row in rows
        ]
    ]


@register_procedure(TASK_GET)
def task_get(session: Session, *, id_account: int, id_user: int, id_task: int) -> ResultSets:
    # A missing task yields four empty sets; the caller decides what that means.
    task = get_owned_task(session, id_account=id_account, id_user=id_user, id_task=id_task)
    if task is None:
        return [[], [], [], []]
    return [
        [_task_row(task)],
        [_subtask_row(item) for item in list_subtasks(session, id_task=task.id)],
        [_tag_row(item) for item in list_tags(session, id_task=task.id)],
        [_attachment_row(item) for item in list_attachments(session, id_task=task.id)],
    ]


@register_procedure(TASK_UPDATE)
def task_update(
    session: Session,
    *,
    id_account: int,
    id_user: int,
    id_task: int,
    title: str,
    description: str,
    due_date: date | None,
    due_time: time | None,
    priority: int,
    status: int,
    id_category: int | None,
    estimated_time: int | None,
) -> ResultSets:
    task = _require_task(session, id_account=id_account, id_user=id_user, id_task=id_task)
    _require_category(session, id_account=id_account, id_category=id_category)
    replace_task(
        session,
        task,
        title=title,
        description=description,
        due_date=due_date,
        due_time=due_time,
        priority=priority,
        status=status,
        id_category=id_category,
        estimated_time=estimated_time,
    )
    return [[{"success": True}]]


@register_procedure(TASK_DELETE)
def task_delete(session: Session, *, id_account: int, id_user: int, id_task: int) -> ResultSets:
    task = _require_task(session, id_account=id_account, id_user=id_user, id_task=id_task)
    soft_delete_task(session, task)
    return [[{"success": True}]]
