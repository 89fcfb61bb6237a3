"""Repository primitives for task entities."""

from __future__ import annotations

from datetime import date
from datetime import time
from typing import Any

from sqlalchemy import Row
from sqlalchemy import func
from sqlalchemy import select
from sqlalchemy import update
from sqlalchemy.orm import Session

from app.db.models.task import Attachment
from app.db.models.task import Category
from app.db.models.task import Subtask
from app.db.models.task import Task
from app.db.models.task import TaskTag


def get_active_category(session: Session, *, id_account: int, id_category: int) -> Category | None:
    """Fetch a non-deleted category inside an account."""
    stmt = select(Category).where(
        Category.id == id_category,
        Category.id_account == id_account,
        Category.deleted.is_(False),
    )
    return session.scalars(stmt).first()


def create_task(
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
) -> Task:
    """Create and return a task row."""
    task = Task(
        id_account=id_account,
        id_user=id_user,
        title=title,
        description=description,
        due_date=due_date,
        due_time=due_time,
        priority=priority,
        status=0,
        id_category=id_category,
        estimated_time=estimated_time,
    )
    session.add(task)
    session.flush()
    session.refresh(task)
    return task


def get_owned_task(session: Session, *, id_account: int, id_user: int, id_task: int) -> Task | None:
    """Fetch a non-deleted task owned by the given account and user."""
    stmt = select(Task).where(
        Task.id == id_task,
        Task.id_account == id_account,
        Task.id_user == id_user,
        Task.deleted.is_(False),
    )
    return session.scalars(stmt).first()


def list_tasks(
    session: Session,
    *,
    id_account: int,
    id_user: int,
    status: int | None = None,
    priority: int | None = None,
    due_date_from: date | None = None,
    due_date_to: date | None = None,
) -> list[Row[Any]]:
    """List owned tasks with child counts, applying each filter only when set."""
    subtask_count = (
        select(func.count(Subtask.id))
        .where(Subtask.id_task == Task.id, Subtask.deleted.is_(False))
        .correlate(Task)
        .scalar_subquery()
    )
    completed_subtask_count = (
        select(func.count(Subtask.id))
        .where(Subtask.id_task == Task.id, Subtask.deleted.is_(False), Subtask.completed.is_(True))
        .correlate(Task)
        .scalar_subquery()
    )
    attachment_count = (
        select(func.count(Attachment.id))
        .where(Attachment.id_task == Task.id, Attachment.deleted.is_(False))
        .correlate(Task)
        .scalar_subquery()
    )

    stmt = select(
        Task,
        subtask_count.label("subtask_count"),
        completed_subtask_count.label("completed_subtask_count"),
        attachment_count.label("attachment_count"),
    ).where(
        Task.id_account == id_account,
        Task.id_user == id_user,
        Task.deleted.is_(False),
    )
    if status is not None:
        stmt = stmt.where(Task.status == status)
    if priority is not None:
        stmt = stmt.where(Task.priority == priority)
    # Bounds are inclusive; a bound excludes undated tasks.
    if due_date_from is not None:
        stmt = stmt.where(Task.due_date >= due_date_from)
    if due_date_to is not None:
        stmt = stmt.where(Task.due_date <= due_date_to)
    stmt = stmt.order_by(Task.due_date.is_(None), Task.due_date, Task.id)
    return list(session.execute(stmt).all())


def list_subtasks(session: Session, *, id_task: int) -> list[Subtask]:
    stmt = (
        select(Subtask)
        .where(Subtask.id_task == id_task, Subtask.deleted.is_(False))
        .order_by(Subtask.id)
    )
    return list(session.scalars(stmt))


def list_tags(session: Session, *, id_task: int) -> list[TaskTag]:
    stmt = select(TaskTag).where(TaskTag.id_task == id_task).order_by(TaskTag.tag)
    return list(session.scalars(stmt))


def list_attachments(session: Session, *, id_task: int) -> list[Attachment]:
    stmt = (
        select(Attachment)
        .where(Attachment.id_task == id_task, Attachment.deleted.is_(False))
        .order_by(Attachment.id)
    )
    return list(session.scalars(stmt))


def replace_task(
    session: Session,
    task: Task,
    *,
    title: str,
    description: str,
    due_date: date | None,
    due_time: time | None,
    priority: int,
    status: int,
    id_category: int | None,
    estimated_time: int | None,
) -> Task:
    """Overwrite every mutable task field."""
    task.title = title
    task.description = description
    task.due_date = due_date
    task.due_time = due_time
    task.priority = priority
    task.status = status
    task.id_category = id_category
    task.estimated_time = estimated_time
    task.date_modified = func.now()
    session.flush()
    session.refresh(task)
    return task


def soft_delete_task(session: Session, task: Task) -> None:
    """Flag a task and its subtasks and attachments as deleted."""
    session.execute(
        update(Subtask).where(Subtask.id_task == task.id).values(deleted=True)
    )
    session.execute(
        update(Attachment).where(Attachment.id_task == task.id).values(deleted=True)
    )
    task.deleted = True
    task.date_modified = func.now()
    session.flush()
