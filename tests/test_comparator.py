import pytest
from pydantic import ValidationError

from listing_match.schemas.matching import FeatureDefinition, FeatureMatch, MatchResult, UserRequirement
from listing_match.services.matching import (
    build_match_table,
    compare_all,
    normalize_property,
    rank_by_percentage,
    summarize_match,
)


def _result(percentage, /, **matches):
    return MatchResult(
        percentage=percentage,
        matches={
            fid: FeatureMatch(matched=matched, importance=importance, feature_label=fid.title())
            for fid, (matched, importance) in matches.items()
        },
    )


def test_compare_all_scores_each_property_independently():
    listings = [
        {"rooms": "3 rum", "features": ["Balkong"]},
        {"rooms": "1 rum", "features": []},
        {"rooms": "2 rum", "features": ["balkong", "hiss"]},
    ]
    requirements = [
        UserRequirement(feature_id="balcony", value=True, importance=3),
        UserRequirement(feature_id="rooms", value={"min": 2}, importance=1),
    ]
    results = compare_all([normalize_property(p) for p in listings], requirements)
    assert len(results) == 3
    assert [r.percentage for r in results] == [100, 0, 100]
    assert results[1].matches["balcony"].matched is False


def test_compare_all_with_no_properties():
    assert compare_all([], [UserRequirement(feature_id="balcony", value=True, importance=1)]) == []


def test_rank_by_percentage_keeps_ties_in_input_order():
    results = [_result(40), _result(80), _result(40), _result(80)]
    assert rank_by_percentage(results) == [1, 3, 0, 2]


def test_summarize_match_orders_by_importance():
    result = _result(50, balcony=(True, 2), rooms=(False, 1), elevator=(True, 4), garden=(False, 3))
    assert summarize_match(result) == {
        "strengths": ["Elevator", "Balcony"],
        "weaknesses": ["Garden", "Rooms"],
    }


def test_build_match_table():
    first = _result(100, balcony=(True, 3))
    second = _result(25, balcony=(False, 3), rooms=(True, 1))
    table = build_match_table([first, second], ["1. Söder", "2. Vasastan"])

    assert list(table.index) == ["balcony", "rooms", "percentage"]
    assert list(table.columns) == ["feature", "importance", "1. Söder", "2. Vasastan"]
    assert table.loc["balcony", "1. Söder"] is True
    assert table.loc["balcony", "2. Vasastan"] is False
    assert table.loc["rooms", "1. Söder"] is None
    assert table.loc["rooms", "importance"] == 1
    assert table.loc["percentage", "2. Vasastan"] == 25
    assert table.loc["percentage", "importance"] is None


def test_build_match_table_needs_one_label_per_result():
    with pytest.raises(ValueError):
        build_match_table([_result(10)], ["a", "b"])


def test_build_match_table_rejects_feature_named_like_the_total_row():
    with pytest.raises(ValueError):
        build_match_table([_result(50, percentage=(True, 2))], ["1. Söder"])


def test_catalog_cannot_define_the_total_row_id():
    with pytest.raises(ValidationError):
        FeatureDefinition(id="percentage", label="Procent", type="number")
