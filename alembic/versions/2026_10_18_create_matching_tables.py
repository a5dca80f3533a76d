from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "3c5a9d1f7b42"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "property_features",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("options", JSONB),
        sa.Column("min_value", sa.Float),
        sa.Column("max_value", sa.Float),
        sa.CheckConstraint("type IN ('number', 'boolean', 'select')", name="ck_property_features_type"),
    )
    op.create_table(
        "user_property_requirements",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("feature_id", sa.String(64), sa.ForeignKey("property_features.id", ondelete="CASCADE"), nullable=False),
        sa.Column("value", JSONB),
        sa.Column("importance", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "feature_id", name="uq_user_property_requirements_user_feature"),
        sa.CheckConstraint("importance BETWEEN 0 AND 4", name="ck_user_property_requirements_importance"),
    )
    op.create_table(
        "saved_properties",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("url", sa.Text),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, server_default=""),
        sa.Column("location", sa.String(255)),
        sa.Column("price", sa.String(64)),
        sa.Column("size", sa.String(64)),
        sa.Column("rooms", sa.String(64)),
        sa.Column("features", JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column("images", JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column("year_built", sa.Integer),
        sa.Column("monthly_fee", sa.String(64)),
        sa.Column("is_analyzed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "property_analyses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("property_id", UUID(as_uuid=True), sa.ForeignKey("saved_properties.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("analysis_summary", sa.Text),
        sa.Column("total_score", sa.Float),
        sa.Column("attribute_scores", JSONB),
        sa.Column("pros", JSONB),
        sa.Column("cons", JSONB),
        sa.Column("investment_rating", sa.Float),
        sa.Column("value_for_money", sa.Float),
        sa.Column("preference_match", JSONB),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "property_comparisons",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("property_ids", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("ai_analysis", JSONB),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("last_viewed_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "comparison_properties",
        sa.Column("comparison_id", UUID(as_uuid=True), sa.ForeignKey("property_comparisons.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("property_id", UUID(as_uuid=True), sa.ForeignKey("saved_properties.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("display_order", sa.Integer, nullable=False),
    )

    features = sa.table(
        "property_features",
        sa.column("id", sa.String),
        sa.column("label", sa.String),
        sa.column("type", sa.String),
        sa.column("options", JSONB),
        sa.column("min_value", sa.Float),
        sa.column("max_value", sa.Float),
    )
    op.bulk_insert(features, [
        {"id": "rooms", "label": "Rooms", "type": "number", "options": None, "min_value": 1, "max_value": 10},
        {"id": "size", "label": "Living area (m²)", "type": "number", "options": None, "min_value": 10, "max_value": 300},
        {"id": "price", "label": "Price", "type": "number", "options": None, "min_value": 0, "max_value": 20000000},
        {"id": "monthly_fee", "label": "Monthly fee", "type": "number", "options": None, "min_value": 0, "max_value": 20000},
        {"id": "location", "label": "Area", "type": "select", "options": ["Södermalm", "Vasastan", "Kungsholmen", "Östermalm", "Bromma"], "min_value": None, "max_value": None},
        {"id": "balcony", "label": "Balcony", "type": "boolean", "options": None, "min_value": None, "max_value": None},
        {"id": "elevator", "label": "Elevator", "type": "boolean", "options": None, "min_value": None, "max_value": None},
        {"id": "parking", "label": "Parking", "type": "boolean", "options": None, "min_value": None, "max_value": None},
        {"id": "garage", "label": "Garage", "type": "boolean", "options": None, "min_value": None, "max_value": None},
        {"id": "garden", "label": "Garden", "type": "boolean", "options": None, "min_value": None, "max_value": None},
        {"id": "renovated", "label": "Renovated", "type": "boolean", "options": None, "min_value": None, "max_value": None},
        {"id": "fireplace", "label": "Fireplace", "type": "boolean", "options": None, "min_value": None, "max_value": None},
        {"id": "bathtub", "label": "Bathtub", "type": "boolean", "options": None, "min_value": None, "max_value": None},
        {"id": "dishwasher", "label": "Dishwasher", "type": "boolean", "options": None, "min_value": None, "max_value": None},
        {"id": "laundry", "label": "Washing machine", "type": "boolean", "options": None, "min_value": None, "max_value": None},
    ])


def downgrade():
    op.drop_table("comparison_properties")
    op.drop_table("property_comparisons")
    op.drop_table("property_analyses")
    op.drop_table("saved_properties")
    op.drop_table("user_property_requirements")
    op.drop_table("property_features")
