from typing import Any, Dict, Iterable, List, Mapping, Sequence

import pandas as pd
from structlog import get_logger

from listing_match.schemas.matching import MATCH_TABLE_TOTAL_ROW, FeatureDefinition, MatchResult, UserRequirement
from listing_match.services.matching.scorer import score_property

logger = get_logger()


def compare_all(
    properties_features: Sequence[Mapping[str, Any]],
    requirements: Iterable[UserRequirement],
    catalog: Iterable[FeatureDefinition] = (),
) -> List[MatchResult]:
    """Scores every property on its own; result i belongs to property i."""
    requirements = list(requirements)
    catalog = list(catalog)
    results = [score_property(features, requirements, catalog) for features in properties_features]
    logger.debug("Properties scored", count=len(results), percentages=[r.percentage for r in results])
    return results


def rank_by_percentage(results: Sequence[MatchResult]) -> List[int]:
    # sorted() is stable, so ties keep input order
    return sorted(range(len(results)), key=lambda i: -results[i].percentage)


def summarize_match(result: MatchResult) -> Dict[str, List[str]]:
    ordered = sorted(result.matches.values(), key=lambda m: -m.importance)
    return {
        "strengths": [m.feature_label for m in ordered if m.matched],
        "weaknesses": [m.feature_label for m in ordered if not m.matched],
    }


def build_match_table(results: Sequence[MatchResult], property_labels: Sequence[str]) -> pd.DataFrame:
    """
    Side-by-side preference table: one row per scored feature, one column per
    property (True / False, None when that property was not scored on it), and
    a closing ``percentage`` row. A feature with that id is rejected.
    """
    if len(results) != len(property_labels):
        raise ValueError("Need exactly one label per match result")

    feature_ids: List[str] = []
    labels: Dict[str, str] = {}
    importance: Dict[str, int] = {}
    for result in results:
        for feature_id, match in result.matches.items():
            if feature_id == MATCH_TABLE_TOTAL_ROW:
                raise ValueError(f"'{MATCH_TABLE_TOTAL_ROW}' cannot be used as a feature id")
            if feature_id not in labels:
                feature_ids.append(feature_id)
                labels[feature_id] = match.feature_label
                importance[feature_id] = match.importance

    rows = []
    for feature_id in feature_ids:
        row = {"feature": labels[feature_id], "importance": importance[feature_id]}
        for label, result in zip(property_labels, results):
            match = result.matches.get(feature_id)
            row[label] = match.matched if match else None
        rows.append(row)

    total = {"feature": MATCH_TABLE_TOTAL_ROW, "importance": None}
    total.update({label: result.percentage for label, result in zip(property_labels, results)})
    rows.append(total)

    return pd.DataFrame(
        rows,
        index=feature_ids + [MATCH_TABLE_TOTAL_ROW],
        columns=["feature", "importance", *property_labels],
        dtype=object,
    )
