"""Create categories, tasks and task child tables."""

from typing import Sequence
from typing import Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_create_task_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create task storage with soft-delete flags and scope columns."""
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("id_account", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id", name="pk_categories"),
    )
    op.create_index("ix_categories_id_account", "categories", ["id_account"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("id_account", sa.Integer(), nullable=False),
        sa.Column("id_user", sa.Integer(), nullable=False),
        sa.Column("id_category", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("due_time", sa.Time(), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("status", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("estimated_time", sa.Integer(), nullable=True),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "date_created",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "date_modified",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("priority BETWEEN 0 AND 2", name="ck_tasks_priority"),
        sa.CheckConstraint("status BETWEEN 0 AND 3", name="ck_tasks_status"),
        sa.CheckConstraint(
            "estimated_time IS NULL OR estimated_time BETWEEN 5 AND 1440",
            name="ck_tasks_estimated_time",
        ),
        sa.ForeignKeyConstraint(
            ["id_category"],
            ["categories.id"],
            name="fk_tasks_id_category_categories",
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_tasks"),
    )
    op.create_index(
        "ix_tasks_scope_due_date",
        "tasks",
        ["id_account", "id_user", "due_date"],
        postgresql_where=sa.text("deleted = false"),
    )

    op.create_table(
        "subtasks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("id_account", sa.Integer(), nullable=False),
        sa.Column("id_task", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "date_created",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.ForeignKeyConstraint(
            ["id_task"],
            ["tasks.id"],
            name="fk_subtasks_id_task_tasks",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_subtasks"),
    )
    op.create_index("ix_subtasks_id_task", "subtasks", ["id_task"])

    op.create_table(
        "task_tags",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("id_account", sa.Integer(), nullable=False),
        sa.Column("id_task", sa.Integer(), nullable=False),
        sa.Column("tag", sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(
            ["id_task"],
            ["tasks.id"],
            name="fk_task_tags_id_task_tasks",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_task_tags"),
        sa.UniqueConstraint("id_task", "tag", name="uq_task_tags_id_task_tag"),
    )
    op.create_index("ix_task_tags_id_task", "task_tags", ["id_task"])

    op.create_table(
        "attachments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("id_account", sa.Integer(), nullable=False),
        sa.Column("id_task", sa.Integer(), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_type", sa.String(length=100), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "date_created",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.ForeignKeyConstraint(
            ["id_task"],
            ["tasks.id"],
            name="fk_attachments_id_task_tasks",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_attachments"),
    )
    op.create_index("ix_attachments_id_task", "attachments", ["id_task"])


def downgrade() -> None:
    """Drop task storage."""
    op.drop_index("ix_attachments_id_task", table_name="attachments")
    op.drop_table("attachments")
    op.drop_index("ix_task_tags_id_task", table_name="task_tags")
    op.drop_table("task_tags")
    op.drop_index("ix_subtasks_id_task", table_name="subtasks")
    op.drop_table("subtasks")
    op.drop_index("ix_tasks_scope_due_date", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("ix_categories_id_account", table_name="categories")
    op.drop_table("categories")
