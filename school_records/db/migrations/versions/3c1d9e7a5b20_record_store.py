"""Record store tables.

- records: JSON documents keyed by (collection, id), ordered by position
- collections: initialization markers, one row per collection ever saved
- session_slots: named single-value slots (current session user id)
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1d9e7a5b20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "records",
        sa.Column("collection", sa.Text(), nullable=False),
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("collection", "id", name="pk_records"),
    )
    op.create_index("ix_records_collection_position", "records", ["collection", "position"])

    op.create_table(
        "collections",
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("name", name="pk_collections"),
    )

    op.create_table(
        "session_slots",
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("name", name="pk_session_slots"),
    )


def downgrade() -> None:
    op.drop_table("session_slots")
    op.drop_table("collections")
    op.drop_index("ix_records_collection_position", table_name="records")
    op.drop_table("records")
