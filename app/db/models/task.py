"""SQLAlchemy models for tasks and their related records."""

from __future__ import annotations

from datetime import date
from datetime import datetime
from datetime import time

from sqlalchemy import Boolean
from sqlalchemy import CheckConstraint
from sqlalchemy import Date
from sqlalchemy import DateTime
from sqlalchemy import ForeignKey
from sqlalchemy import Index
from sqlalchemy import Integer
from sqlalchemy import String
from sqlalchemy import Text
from sqlalchemy import Time
from sqlalchemy import UniqueConstraint
from sqlalchemy import func
from sqlalchemy import text
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column


class Base(DeclarativeBase):
    """Declarative base for ORM models."""


class Category(Base):
    """Account-scoped task category."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    id_account: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Task(Base):
    """Task owned by one user within one account."""

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint("priority BETWEEN 0 AND 2", name="ck_tasks_priority"),
        CheckConstraint("status BETWEEN 0 AND 3", name="ck_tasks_status"),
        CheckConstraint(
            "estimated_time IS NULL OR estimated_time BETWEEN 5 AND 1440",
            name="ck_tasks_estimated_time",
        ),
        Index(
            "ix_tasks_scope_due_date",
            "id_account",
            "id_user",
            "due_date",
            postgresql_where=text("deleted = false"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    id_account: Mapped[int] = mapped_column(Integer, nullable=False)
    id_user: Mapped[int] = mapped_column(Integer, nullable=False)
    id_category: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("categories.id", name="fk_tasks_id_category_categories", ondelete="RESTRICT"),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    estimated_time: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    date_modified: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class Subtask(Base):
    """Checklist item belonging to a task."""

    __tablename__ = "subtasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    id_account: Mapped[int] = mapped_column(Integer, nullable=False)
    id_task: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tasks.id", name="fk_subtasks_id_task_tasks", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class TaskTag(Base):
    """Free-form label attached to a task."""

    __tablename__ = "task_tags"
    __table_args__ = (UniqueConstraint("id_task", "tag", name="uq_task_tags_id_task_tag"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    id_account: Mapped[int] = mapped_column(Integer, nullable=False)
    id_task: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tasks.id", name="fk_task_tags_id_task_tasks", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag: Mapped[str] = mapped_column(String(50), nullable=False)


class Attachment(Base):
    """File metadata for an uploaded task attachment."""

    __tablename__ = "attachments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    id_account: Mapped[int] = mapped_column(Integer, nullable=False)
    id_task: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tasks.id", name="fk_attachments_id_task_tasks", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
