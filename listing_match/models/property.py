import uuid
from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from .preference import Base, utc_now


class SavedProperty(Base):
    __tablename__ = "saved_properties"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    url = Column(Text)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="")
    location = Column(String(255))
    # free text as extracted from the listing ("4 950 000 kr", "74 m²", "3 rum")
    price = Column(String(64))
    size = Column(String(64))
    rooms = Column(String(64))
    features = Column(JSONB, default=[])
    images = Column(JSONB, default=[])
    year_built = Column(Integer)
    monthly_fee = Column(String(64))
    is_analyzed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    analysis = relationship("PropertyAnalysis", back_populates="property", uselist=False)


class PropertyAnalysis(Base):
    __tablename__ = "property_analyses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    property_id = Column(UUID(as_uuid=True), ForeignKey("saved_properties.id", ondelete="CASCADE"), unique=True, nullable=False)
    analysis_summary = Column(Text)
    total_score = Column(Float)
    attribute_scores = Column(JSONB, default=[])
    pros = Column(JSONB, default=[])
    cons = Column(JSONB, default=[])
    investment_rating = Column(Float)
    value_for_money = Column(Float)
    preference_match = Column(JSONB)  # MatchResult snapshot
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    property = relationship("SavedProperty", back_populates="analysis")
