import uuid
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from listing_match.models import (
    ComparisonNote,
    ComparisonProperty,
    PropertyAnalysis,
    PropertyComparison,
    PropertyFeature,
    SavedProperty,
    UserPropertyRequirement,
    utc_now,
)
from listing_match.schemas.matching import FeatureDefinition, MatchResult, UserRequirement
from listing_match.services.matching import wrap_preference_value

logger = get_logger()

PROPERTY_FIELDS = (
    "id", "url", "title", "description", "location", "price", "size", "rooms",
    "features", "images", "year_built", "monthly_fee", "is_analyzed",
)
ANALYSIS_FIELDS = (
    "analysis_summary", "total_score", "attribute_scores", "pros", "cons",
    "investment_rating", "value_for_money", "preference_match",
)


def _as_uuid(value: Any) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def _property_dict(row: SavedProperty) -> Dict[str, Any]:
    record = {field: getattr(row, field) for field in PROPERTY_FIELDS}
    record["id"] = str(row.id)
    record["features"] = row.features or []
    record["images"] = row.images or []
    return record


def _analysis_dict(row: PropertyAnalysis) -> Dict[str, Any]:
    record = {field: getattr(row, field) for field in ANALYSIS_FIELDS}
    record["id"] = str(row.id)
    record["property_id"] = str(row.property_id)
    return record


def _comparison_dict(row: PropertyComparison) -> Dict[str, Any]:
    return {
        "id": str(row.id),
        "title": row.title,
        "description": row.description,
        "property_ids": list(row.property_ids or []),
        "ai_analysis": row.ai_analysis,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
        "last_viewed_at": row.last_viewed_at.isoformat() if row.last_viewed_at else None,
    }


def _note_dict(row: ComparisonNote) -> Dict[str, Any]:
    return {
        "id": str(row.id),
        "comparison_id": str(row.comparison_id),
        "property_id": str(row.property_id) if row.property_id else None,
        "note_text": row.note_text,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }


class PropertyStore:
    """Persistence for everything the matching endpoints read and write.

    Returns plain dicts and schema objects so callers never hold ORM rows.
    Unknown or malformed ids read as "not found".
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_feature_catalog(self) -> List[FeatureDefinition]:
        result = await self.session.execute(select(PropertyFeature).order_by(PropertyFeature.id))
        return [
            FeatureDefinition(
                id=row.id,
                label=row.label,
                type=row.type,
                options=row.options,
                min_value=row.min_value,
                max_value=row.max_value,
            )
            for row in result.scalars().all()
        ]

    async def get_user_requirements(self, user_id: str) -> List[Dict[str, Any]]:
        user_uuid = _as_uuid(user_id)
        if user_uuid is None:
            return []
        result = await self.session.execute(
            select(UserPropertyRequirement).where(UserPropertyRequirement.user_id == user_uuid)
        )
        return [
            {"feature_id": row.feature_id, "value": row.value, "importance": row.importance}
            for row in result.scalars().all()
        ]

    async def replace_user_requirements(self, user_id: str, requirements: Sequence[UserRequirement]) -> None:
        user_uuid = _as_uuid(user_id)
        if user_uuid is None:
            raise ValueError(f"Invalid user id: {user_id}")
        try:
            await self.session.execute(
                delete(UserPropertyRequirement).where(UserPropertyRequirement.user_id == user_uuid)
            )
            for requirement in requirements:
                self.session.add(
                    UserPropertyRequirement(
                        user_id=user_uuid,
                        feature_id=requirement.feature_id,
                        value=wrap_preference_value(requirement.value),
                        importance=requirement.importance,
                    )
                )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("User requirements replaced", user_id=user_id, count=len(requirements))

    async def get_property(self, property_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        property_uuid, user_uuid = _as_uuid(property_id), _as_uuid(user_id)
        if property_uuid is None or user_uuid is None:
            return None
        result = await self.session.execute(
            select(SavedProperty).where(SavedProperty.id == property_uuid, SavedProperty.user_id == user_uuid)
        )
        row = result.scalar_one_or_none()
        return _property_dict(row) if row else None

    async def get_properties(self, property_ids: Sequence[str], user_id: str) -> List[Dict[str, Any]]:
        user_uuid = _as_uuid(user_id)
        wanted = [u for u in (_as_uuid(pid) for pid in property_ids) if u is not None]
        if user_uuid is None or not wanted:
            return []
        result = await self.session.execute(
            select(SavedProperty).where(SavedProperty.id.in_(wanted), SavedProperty.user_id == user_uuid)
        )
        by_id = {row.id: row for row in result.scalars().all()}
        # keep the caller's ordering; ids that were not found are dropped
        return [_property_dict(by_id[u]) for u in wanted if u in by_id]

    async def get_analysis(self, property_id: str) -> Optional[Dict[str, Any]]:
        property_uuid = _as_uuid(property_id)
        if property_uuid is None:
            return None
        result = await self.session.execute(
            select(PropertyAnalysis).where(PropertyAnalysis.property_id == property_uuid)
        )
        row = result.scalar_one_or_none()
        return _analysis_dict(row) if row else None

    async def save_preference_match(self, property_id: str, match_result: MatchResult) -> bool:
        """Embeds the match result in the property's analysis; False when there is none."""
        property_uuid = _as_uuid(property_id)
        if property_uuid is None:
            return False
        result = await self.session.execute(
            select(PropertyAnalysis).where(PropertyAnalysis.property_id == property_uuid)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return False
        row.preference_match = match_result.model_dump(by_alias=True)
        row.updated_at = utc_now()
        await self.session.commit()
        return True

    async def save_analysis(self, property_id: str, user_id: str, analysis: Dict[str, Any]) -> Dict[str, Any]:
        property_uuid, user_uuid = _as_uuid(property_id), _as_uuid(user_id)
        try:
            result = await self.session.execute(
                select(SavedProperty).where(SavedProperty.id == property_uuid, SavedProperty.user_id == user_uuid)
            )
            prop = result.scalar_one()
            result = await self.session.execute(
                select(PropertyAnalysis).where(PropertyAnalysis.property_id == property_uuid)
            )
            row = result.scalar_one_or_none()
            if row is None:
                row = PropertyAnalysis(property_id=property_uuid)
                self.session.add(row)
            for field in ANALYSIS_FIELDS:
                if field in analysis:
                    setattr(row, field, analysis[field])
            row.updated_at = utc_now()
            prop.is_analyzed = True
            await self.session.commit()
            await self.session.refresh(row)
        except Exception:
            await self.session.rollback()
            raise
        return _analysis_dict(row)

    async def create_comparison(
        self,
        user_id: str,
        title: str,
        property_ids: Sequence[str],
        description: Optional[str] = None,
        ai_analysis: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        user_uuid = _as_uuid(user_id)
        comparison = PropertyComparison(
            user_id=user_uuid,
            title=title,
            description=description,
            property_ids=[str(pid) for pid in property_ids],
            ai_analysis=ai_analysis,
            last_viewed_at=utc_now(),
        )
        try:
            self.session.add(comparison)
            await self.session.flush()
            for order, property_id in enumerate(property_ids, start=1):
                self.session.add(
                    ComparisonProperty(
                        comparison_id=comparison.id,
                        property_id=_as_uuid(property_id),
                        display_order=order,
                    )
                )
            await self.session.commit()
            await self.session.refresh(comparison)
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Comparison created", user_id=user_id, comparison_id=str(comparison.id), properties=len(property_ids))
        return _comparison_dict(comparison)

    async def list_comparisons(self, user_id: str) -> List[Dict[str, Any]]:
        user_uuid = _as_uuid(user_id)
        if user_uuid is None:
            return []
        result = await self.session.execute(
            select(PropertyComparison)
            .where(PropertyComparison.user_id == user_uuid)
            .order_by(PropertyComparison.last_viewed_at.desc())
        )
        return [_comparison_dict(row) for row in result.scalars().all()]

    async def get_comparison(self, comparison_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        comparison_uuid, user_uuid = _as_uuid(comparison_id), _as_uuid(user_id)
        if comparison_uuid is None or user_uuid is None:
            return None
        result = await self.session.execute(
            select(PropertyComparison).where(
                PropertyComparison.id == comparison_uuid, PropertyComparison.user_id == user_uuid
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        row.last_viewed_at = utc_now()
        await self.session.commit()
        return _comparison_dict(row)

    async def save_comparison_analysis(self, comparison_id: str, user_id: str, ai_analysis: Dict[str, Any]) -> bool:
        comparison_uuid, user_uuid = _as_uuid(comparison_id), _as_uuid(user_id)
        if comparison_uuid is None or user_uuid is None:
            return False
        result = await self.session.execute(
            select(PropertyComparison).where(
                PropertyComparison.id == comparison_uuid, PropertyComparison.user_id == user_uuid
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            return False
        row.ai_analysis = ai_analysis
        row.updated_at = utc_now()
        await self.session.commit()
        return True

    async def get_comparison_owner(self, comparison_id: str) -> Optional[str]:
        comparison_uuid = _as_uuid(comparison_id)
        if comparison_uuid is None:
            return None
        result = await self.session.execute(
            select(PropertyComparison.user_id).where(PropertyComparison.id == comparison_uuid)
        )
        owner = result.scalar_one_or_none()
        return str(owner) if owner else None

    async def _replace_comparison_properties(self, comparison_uuid: uuid.UUID, property_ids: Sequence[str]) -> None:
        await self.session.execute(
            delete(ComparisonProperty).where(ComparisonProperty.comparison_id == comparison_uuid)
        )
        for order, property_id in enumerate(property_ids, start=1):
            self.session.add(
                ComparisonProperty(
                    comparison_id=comparison_uuid,
                    property_id=_as_uuid(property_id),
                    display_order=order,
                )
            )

    async def update_comparison(
        self,
        comparison_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        property_ids: Optional[Sequence[str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Updates the given fields; None leaves a field as it is. A new property set
        replaces the ordered junction rows and drops the stored narrative, which
        refers to properties by position.
        """
        comparison_uuid = _as_uuid(comparison_id)
        if comparison_uuid is None:
            return None
        try:
            result = await self.session.execute(
                select(PropertyComparison).where(PropertyComparison.id == comparison_uuid)
            )
            row = result.scalar_one_or_none()
            if row is None:
                return None
            if title is not None:
                row.title = title
            if description is not None:
                row.description = description
            if property_ids is not None:
                row.property_ids = [str(pid) for pid in property_ids]
                row.ai_analysis = None
                await self._replace_comparison_properties(comparison_uuid, property_ids)
            row.updated_at = row.last_viewed_at = utc_now()
            await self.session.commit()
            await self.session.refresh(row)
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Comparison updated", comparison_id=comparison_id, properties_changed=property_ids is not None)
        return _comparison_dict(row)

    async def delete_comparison(self, comparison_id: str) -> bool:
        comparison_uuid = _as_uuid(comparison_id)
        if comparison_uuid is None:
            return False
        try:
            result = await self.session.execute(
                delete(PropertyComparison).where(PropertyComparison.id == comparison_uuid)
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return result.rowcount > 0

    async def add_comparison_note(
        self, comparison_id: str, note_text: str, property_id: Optional[str] = None
    ) -> Dict[str, Any]:
        comparison_uuid = _as_uuid(comparison_id)
        note = ComparisonNote(
            comparison_id=comparison_uuid,
            property_id=_as_uuid(property_id) if property_id else None,
            note_text=note_text,
        )
        try:
            self.session.add(note)
            result = await self.session.execute(
                select(PropertyComparison).where(PropertyComparison.id == comparison_uuid)
            )
            comparison = result.scalar_one()
            comparison.last_viewed_at = utc_now()
            await self.session.commit()
            await self.session.refresh(note)
        except Exception:
            await self.session.rollback()
            raise
        return _note_dict(note)

    async def get_comparison_notes(self, comparison_id: str) -> List[Dict[str, Any]]:
        comparison_uuid = _as_uuid(comparison_id)
        if comparison_uuid is None:
            return []
        result = await self.session.execute(
            select(ComparisonNote)
            .where(ComparisonNote.comparison_id == comparison_uuid)
            .order_by(ComparisonNote.created_at)
        )
        return [_note_dict(row) for row in result.scalars().all()]
