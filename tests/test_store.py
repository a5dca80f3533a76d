import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from listing_match.schemas.matching import UserRequirement
from listing_match.services.store import PROPERTY_FIELDS, PropertyStore

USER_ID = "6f1c2a9e-3d4b-4c5a-9e8f-0a1b2c3d4e5f"


def _row(title):
    row = SimpleNamespace(**{field: None for field in PROPERTY_FIELDS})
    row.id = uuid.uuid4()
    row.title = title
    row.features = ["Balkong"]
    return row


def _session(rows=()):
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(rows)
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)
    session.add = MagicMock()
    return session


@pytest.mark.asyncio
async def test_get_properties_keeps_caller_order_and_drops_missing():
    first, second = _row("Söder"), _row("Vasastan")
    # the database returns rows in its own order
    store = PropertyStore(_session([second, first]))
    missing = str(uuid.uuid4())

    properties = await store.get_properties([str(first.id), missing, "not-a-uuid", str(second.id)], USER_ID)

    assert [p["title"] for p in properties] == ["Söder", "Vasastan"]
    assert properties[0]["id"] == str(first.id)
    assert properties[0]["images"] == []
    assert store.session.execute.await_count == 1


@pytest.mark.asyncio
async def test_get_properties_without_valid_ids_skips_the_query():
    store = PropertyStore(_session())
    assert await store.get_properties(["nope"], USER_ID) == []
    assert await store.get_properties([str(uuid.uuid4())], "not-a-user") == []
    store.session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_replace_user_requirements_wraps_values():
    store = PropertyStore(_session())
    await store.replace_user_requirements(USER_ID, [
        UserRequirement(feature_id="balcony", value=True, importance=4),
        UserRequirement(feature_id="rooms", value={"min": 2}, importance=2),
    ])

    added = [call.args[0] for call in store.session.add.call_args_list]
    assert [(r.feature_id, r.value, r.importance) for r in added] == [
        ("balcony", {"value": True}, 4),
        ("rooms", {"min": 2}, 2),
    ]
    store.session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_failed_write_rolls_back():
    store = PropertyStore(_session())
    store.session.commit.side_effect = RuntimeError("connection lost")

    with pytest.raises(RuntimeError):
        await store.replace_user_requirements(USER_ID, [UserRequirement(feature_id="balcony", value=True, importance=1)])
    store.session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_unknown_comparison_owner():
    store = PropertyStore(_session())
    assert await store.get_comparison_owner("not-a-uuid") is None
    store.session.execute.assert_not_awaited()
