import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from .preference import Base, utc_now


class PropertyComparison(Base):
    __tablename__ = "property_comparisons"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    property_ids = Column(JSONB, nullable=False, default=[])
    ai_analysis = Column(JSONB)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
    last_viewed_at = Column(DateTime(timezone=True), default=utc_now)


class ComparisonProperty(Base):
    __tablename__ = "comparison_properties"

    comparison_id = Column(UUID(as_uuid=True), ForeignKey("property_comparisons.id", ondelete="CASCADE"), primary_key=True)
    property_id = Column(UUID(as_uuid=True), ForeignKey("saved_properties.id", ondelete="CASCADE"), primary_key=True)
    display_order = Column(Integer, nullable=False)


class ComparisonNote(Base):
    __tablename__ = "comparison_notes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    comparison_id = Column(UUID(as_uuid=True), ForeignKey("property_comparisons.id", ondelete="CASCADE"), nullable=False, index=True)
    # None for a note on the comparison as a whole
    property_id = Column(UUID(as_uuid=True), ForeignKey("saved_properties.id", ondelete="CASCADE"))
    note_text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
