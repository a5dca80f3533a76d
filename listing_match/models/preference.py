from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, relationship
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(AsyncAttrs, DeclarativeBase):
    pass


class PropertyFeature(Base):
    __tablename__ = "property_features"

    id = Column(String(64), primary_key=True)  # e.g. "balcony", "rooms"
    label = Column(String(255), nullable=False)
    type = Column(String(16), nullable=False)  # number | boolean | select
    options = Column(JSONB)
    min_value = Column(Float)
    max_value = Column(Float)

    __table_args__ = (
        CheckConstraint("type IN ('number', 'boolean', 'select')", name="ck_property_features_type"),
    )


class UserPropertyRequirement(Base):
    __tablename__ = "user_property_requirements"

    id = Column(Integer, primary_key=True)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    feature_id = Column(String(64), ForeignKey("property_features.id", ondelete="CASCADE"), nullable=False)
    value = Column(JSONB)  # stored wrapped: {"value": X} or a {"min", "max"} range
    importance = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    feature = relationship("PropertyFeature")

    __table_args__ = (
        UniqueConstraint("user_id", "feature_id", name="uq_user_property_requirements_user_feature"),
        CheckConstraint("importance BETWEEN 0 AND 4", name="ck_user_property_requirements_importance"),
    )
