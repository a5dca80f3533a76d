from .normalizer import FEATURE_KEYWORDS, normalize_property, parse_amount, parse_int_prefix
from .preferences import (
    coerce_value,
    requirements_from_records,
    resolve_preference_value,
    value_fits_feature,
    wrap_preference_value,
)
from .scorer import describe_match_quality, match_percentage, score_property, values_match
from .comparator import build_match_table, compare_all, rank_by_percentage, summarize_match

__all__ = [
    "FEATURE_KEYWORDS",
    "normalize_property",
    "parse_amount",
    "parse_int_prefix",
    "coerce_value",
    "requirements_from_records",
    "resolve_preference_value",
    "value_fits_feature",
    "wrap_preference_value",
    "describe_match_quality",
    "match_percentage",
    "score_property",
    "values_match",
    "build_match_table",
    "compare_all",
    "rank_by_percentage",
    "summarize_match",
]
