"""
Weighted preference matching.

Each requirement with importance > 0 contributes its importance to the maximum
score, and to the score when the property's normalized value satisfies it.
Requirements with importance 0 are ignored entirely. Malformed values never
raise: a requirement that cannot be evaluated simply does not match.
"""
import math
from numbers import Real
from typing import Any, Iterable, Mapping

from listing_match.schemas.matching import FeatureDefinition, FeatureMatch, MatchResult, UserRequirement

QUALITY_BANDS = (
    (90, "Perfect match"),
    (80, "Excellent match"),
    (70, "Very good match"),
    (60, "Good match"),
    (50, "Acceptable match"),
    (40, "Weak match"),
    (30, "Poor match"),
)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_range(value: Any) -> bool:
    return isinstance(value, Mapping) and ("min" in value or "max" in value)


def _in_range(property_value: Any, bounds: Mapping) -> bool:
    if not _is_number(property_value):
        return False
    low, high = bounds.get("min"), bounds.get("max")
    if low is not None and not (_is_number(low) and property_value >= low):
        return False
    if high is not None and not (_is_number(high) and property_value <= high):
        return False
    return True


def _strict_equals(a: Any, b: Any) -> bool:
    # True == 1 in Python; a boolean never equals a number here
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a is b
    if _is_number(a) and _is_number(b):
        return a == b
    return type(a) is type(b) and a == b


def values_match(property_value: Any, preference_value: Any) -> bool:
    if property_value is None or preference_value is None:
        return False
    if isinstance(preference_value, bool):
        return isinstance(property_value, bool) and property_value is preference_value
    if _is_range(preference_value):
        return _in_range(property_value, preference_value)
    if isinstance(property_value, str) and isinstance(preference_value, str):
        return preference_value.lower() in property_value.lower()
    return _strict_equals(property_value, preference_value)


def match_percentage(score: int, max_score: int) -> int:
    if max_score <= 0:
        return 0
    # half-up, not banker's rounding: 12.5 -> 13
    return int(math.floor(100 * score / max_score + 0.5))


def score_property(
    features: Mapping[str, Any],
    requirements: Iterable[UserRequirement],
    catalog: Iterable[FeatureDefinition] = (),
) -> MatchResult:
    labels = {feature.id: feature.label for feature in catalog}
    score = 0
    max_score = 0
    matches = {}

    for requirement in requirements:
        importance = requirement.importance
        if importance <= 0:
            continue
        feature_id = requirement.feature_id
        max_score += importance
        matched = values_match(features.get(feature_id), requirement.value)
        if matched:
            score += importance
        matches[feature_id] = FeatureMatch(
            matched=matched,
            importance=importance,
            feature_label=labels.get(feature_id, feature_id),
        )

    return MatchResult(
        score=score,
        max_score=max_score,
        percentage=match_percentage(score, max_score),
        matches=matches,
    )


def describe_match_quality(percentage: int) -> str:
    for threshold, label in QUALITY_BANDS:
        if percentage >= threshold:
            return label
    return "Very poor match"
