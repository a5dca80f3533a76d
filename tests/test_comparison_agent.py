import pytest

from listing_match.schemas.matching import UserRequirement
from listing_match.services.comparison_agent import property_labels, run_comparison_agent


@pytest.fixture
async def preferences(store, user_id):
    await store.replace_user_requirements(user_id, [
        UserRequirement(feature_id="balcony", value=True, importance=4),
        UserRequirement(feature_id="elevator", value=True, importance=2),
        UserRequirement(feature_id="rooms", value={"min": 2}, importance=2),
    ])


@pytest.mark.asyncio
async def test_comparison_keeps_input_order(store, user_id, property_ids, preferences, mock_comparison_narrative):
    state = await run_comparison_agent(user_id, property_ids, store, title="Stockholm")

    assert [p["id"] for p in state.properties] == property_ids
    assert [r.percentage for r in state.match_results] == [100, 0, 50]
    assert state.ranking == [0, 2, 1]
    assert state.summaries[0]["strengths"] == ["Balkong", "Hiss", "Antal rum"]
    assert state.narrative["summary"] == "Söder wins"
    assert mock_comparison_narrative == [{"properties": 3, "title": "Stockholm"}]
    assert state.comparison is None


@pytest.mark.asyncio
async def test_match_table_rows(store, user_id, property_ids, preferences, mock_comparison_narrative):
    state = await run_comparison_agent(user_id, property_ids[:2], store, with_narrative=False)

    labels = property_labels(state.properties)
    assert labels == ["1. Ljus trea på Söder", "2. Etta i Vasastan"]
    assert [row["feature_id"] for row in state.match_table] == ["balcony", "elevator", "rooms", "percentage"]
    assert state.match_table[0][labels[0]] is True
    assert state.match_table[0][labels[1]] is False
    assert state.match_table[-1][labels[0]] == 100
    assert state.narrative is None
    assert mock_comparison_narrative == []


@pytest.mark.asyncio
async def test_saved_comparison(store, user_id, property_ids, preferences, mock_comparison_narrative):
    state = await run_comparison_agent(
        user_id, property_ids[:2], store, title="Söder vs Vasastan", description="Första visningarna", save=True
    )

    saved = store.comparisons[state.comparison["id"]]
    assert saved["property_ids"] == property_ids[:2]
    assert saved["description"] == "Första visningarna"
    assert saved["ai_analysis"]["summary"] == "Söder wins"


@pytest.mark.asyncio
async def test_missing_properties_are_dropped(store, user_id, property_ids, mock_comparison_narrative):
    ids = [property_ids[0], "not-a-saved-property", property_ids[1]]
    state = await run_comparison_agent(user_id, ids, store, with_narrative=False)

    assert [p["id"] for p in state.properties] == property_ids[:2]
    # no preferences set
    assert all(r.max_score == 0 and r.percentage == 0 for r in state.match_results)


@pytest.mark.asyncio
async def test_fewer_than_two_properties(store, user_id, property_ids, mock_comparison_narrative):
    with pytest.raises(ValueError):
        await run_comparison_agent(user_id, [property_ids[0], "missing"], store)
