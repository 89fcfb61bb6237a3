"""Model module imports for SQLAlchemy metadata registration."""

from app.db.models.task import Attachment
from app.db.models.task import Base
from app.db.models.task import Category
from app.db.models.task import Subtask
from app.db.models.task import Task
from app.db.models.task import TaskTag

__all__ = [
    "Attachment",
    "Base",
    "Category",
    "Subtask",
    "Task",
    "TaskTag",
]
