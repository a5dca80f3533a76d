from typing import Any, Dict, Iterable, List, Mapping, Optional

from structlog import get_logger

from listing_match.schemas.matching import FeatureDefinition, FeatureType, UserRequirement

logger = get_logger()

MIN_IMPORTANCE = 0
MAX_IMPORTANCE = 4


def resolve_preference_value(value: Any) -> Any:
    """
    Returns the comparable value of a stored preference.

    Stored values are sometimes wrapped as ``{"value": X}``. Exactly one level of
    wrapping is removed; primitives and range dicts (``{"min": .., "max": ..}``)
    pass through. Accepts the bare stored value, a requirement record (mapping
    with ``feature_id``) or a ``UserRequirement``.
    """
    if isinstance(value, UserRequirement):
        value = value.value
    elif isinstance(value, Mapping) and ("feature_id" in value or "featureId" in value):
        value = value.get("value")

    if isinstance(value, Mapping) and "value" in value:
        value = value["value"]
    return value


def wrap_preference_value(value: Any) -> Any:
    if isinstance(value, Mapping) and ("min" in value or "max" in value):
        return dict(value)
    return {"value": value}


def _to_number(value: Any) -> Any:
    if isinstance(value, str):
        text = value.strip().replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return value
        return int(number) if number.is_integer() else number
    return value


def coerce_value(value: Any, feature: Optional[FeatureDefinition]) -> Any:
    if value is None or feature is None:
        return value
    if feature.type == FeatureType.boolean and isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        return value
    if feature.type == FeatureType.number:
        if isinstance(value, Mapping):
            return {key: _to_number(bound) for key, bound in value.items()}
        return _to_number(value)
    return value


def _is_plain_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def value_fits_feature(value: Any, feature: FeatureDefinition) -> bool:
    """Whether an unwrapped, coerced value has a shape the scorer can evaluate for this feature."""
    if value is None:
        return True
    if feature.type == FeatureType.boolean:
        return isinstance(value, bool)
    if feature.type == FeatureType.number:
        if isinstance(value, Mapping):
            return (
                bool(value)
                and set(value) <= {"min", "max"}
                and all(bound is None or _is_plain_number(bound) for bound in value.values())
            )
        return _is_plain_number(value)
    return isinstance(value, str)


def _importance(raw: Any, feature_id: str) -> int:
    try:
        importance = int(raw)
    except (TypeError, ValueError):
        logger.warning("Unreadable requirement importance, treating as not important",
                       feature_id=feature_id, importance=raw)
        return MIN_IMPORTANCE
    clamped = min(max(importance, MIN_IMPORTANCE), MAX_IMPORTANCE)
    if clamped != importance:
        logger.warning("Requirement importance out of range, clamped",
                       feature_id=feature_id, importance=importance, clamped=clamped)
    return clamped


def requirements_from_records(
    records: Iterable[Mapping[str, Any]],
    catalog: Iterable[FeatureDefinition] = (),
) -> List[UserRequirement]:
    features: Dict[str, FeatureDefinition] = {f.id: f for f in catalog}
    requirements = []
    for record in records:
        feature_id = record.get("feature_id") or record.get("featureId")
        if not feature_id:
            logger.warning("Skipping requirement record without feature id", record=dict(record))
            continue
        value = coerce_value(resolve_preference_value(record.get("value")), features.get(feature_id))
        requirements.append(
            UserRequirement(
                feature_id=feature_id,
                value=value,
                importance=_importance(record.get("importance"), feature_id),
            )
        )
    return requirements
