"""add folded search columns"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0003_add_search_text"
down_revision = "0002_create_tasks"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "tasks",
        sa.Column("title_folded", sa.String(length=400), nullable=False, server_default=""),
    )
    op.add_column(
        "tasks",
        sa.Column("description_folded", sa.Text(), nullable=False, server_default=""),
    )

    # folding happens in Python so it matches the in-memory search
    bind = op.get_bind()
    tasks = sa.table(
        "tasks",
        sa.column("id", sa.Integer()),
        sa.column("title", sa.String()),
        sa.column("description", sa.Text()),
        sa.column("title_folded", sa.String()),
        sa.column("description_folded", sa.Text()),
    )
    rows = bind.execute(sa.select(tasks.c.id, tasks.c.title, tasks.c.description)).all()
    for task_id, title, description in rows:
        bind.execute(
            tasks.update()
            .where(tasks.c.id == task_id)
            .values(title_folded=(title or "").lower(), description_folded=(description or "").lower())
        )


def downgrade() -> None:
    op.drop_column("tasks", "description_folded")
    op.drop_column("tasks", "title_folded")
