from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision = "8e2f4b6a1c93"
down_revision = "3c5a9d1f7b42"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "comparison_notes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("comparison_id", UUID(as_uuid=True), sa.ForeignKey("property_comparisons.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("property_id", UUID(as_uuid=True), sa.ForeignKey("saved_properties.id", ondelete="CASCADE")),
        sa.Column("note_text", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade():
    op.drop_table("comparison_notes")
