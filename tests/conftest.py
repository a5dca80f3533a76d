import copy
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from listing_match.dependencies.auth import current_user_id
from listing_match.dependencies.store import get_store
from listing_match.main import app
from listing_match.schemas.matching import FeatureDefinition
from listing_match.services.matching import wrap_preference_value

USER_ID = "6f1c2a9e-3d4b-4c5a-9e8f-0a1b2c3d4e5f"

CATALOG = [
    FeatureDefinition(id="balcony", label="Balkong", type="boolean"),
    FeatureDefinition(id="elevator", label="Hiss", type="boolean"),
    FeatureDefinition(id="rooms", label="Antal rum", type="number", min_value=1, max_value=10),
    FeatureDefinition(id="price", label="Pris", type="number"),
    FeatureDefinition(id="location", label="Område", type="select", options=["Södermalm", "Vasastan"]),
]

PROPERTIES = [
    {
        "id": "11111111-1111-4111-8111-111111111111",
        "title": "Ljus trea på Söder",
        "location": "Södermalm, Stockholm",
        "price": "4 950 000 kr",
        "size": "74 m²",
        "rooms": "3 rum",
        "monthly_fee": "3 400 kr/mån",
        "features": ["Balkong", "Hiss", "Diskmaskin"],
        "images": [],
        "is_analyzed": False,
    },
    {
        "id": "22222222-2222-4222-8222-222222222222",
        "title": "Etta i Vasastan",
        "location": "Vasastan, Stockholm",
        "price": "2 100 000 kr",
        "size": "31 m²",
        "rooms": "1 rum",
        "monthly_fee": "1 900 kr/mån",
        "features": ["Tvättmaskin"],
        "images": [],
        "is_analyzed": False,
    },
    {
        "id": "33333333-3333-4333-8333-333333333333",
        "title": "Tvåa med hiss",
        "location": "Kungsholmen",
        "price": "3 300 000 kr",
        "size": "52 m²",
        "rooms": "2 rum",
        "monthly_fee": None,
        "features": ["hiss"],
        "images": [],
        "is_analyzed": True,
    },
]


class FakeStore:
    """In-memory stand-in for PropertyStore with the same method surface."""

    def __init__(self):
        self.catalog = list(CATALOG)
        self.properties = {p["id"]: copy.deepcopy(p) for p in PROPERTIES}
        self.requirements = {}
        self.analyses = {PROPERTIES[2]["id"]: {"id": "a-1", "property_id": PROPERTIES[2]["id"], "analysis_summary": "Stored"}}
        self.comparisons = {}
        self.notes = []

    async def get_feature_catalog(self):
        return list(self.catalog)

    async def get_user_requirements(self, user_id):
        return [dict(r) for r in self.requirements.get(user_id, [])]

    async def replace_user_requirements(self, user_id, requirements):
        self.requirements[user_id] = [
            {"feature_id": r.feature_id, "value": wrap_preference_value(r.value), "importance": r.importance}
            for r in requirements
        ]

    async def get_property(self, property_id, user_id):
        prop = self.properties.get(property_id)
        return copy.deepcopy(prop) if prop else None

    async def get_properties(self, property_ids, user_id):
        return [copy.deepcopy(self.properties[pid]) for pid in property_ids if pid in self.properties]

    async def get_analysis(self, property_id):
        return self.analyses.get(property_id)

    async def save_preference_match(self, property_id, match_result):
        analysis = self.analyses.get(property_id)
        if analysis is None:
            return False
        analysis["preference_match"] = match_result.model_dump(by_alias=True)
        return True

    async def save_analysis(self, property_id, user_id, analysis):
        record = {"id": f"a-{property_id}", "property_id": property_id, **analysis}
        self.analyses[property_id] = record
        self.properties[property_id]["is_analyzed"] = True
        return record

    async def create_comparison(self, user_id, title, property_ids, description=None, ai_analysis=None):
        comparison = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "title": title,
            "description": description,
            "property_ids": list(property_ids),
            "ai_analysis": ai_analysis,
            "created_at": "2026-10-18T10:00:00",
            "last_viewed_at": "2026-10-18T10:00:00",
        }
        self.comparisons[comparison["id"]] = comparison
        return dict(comparison)

    async def list_comparisons(self, user_id):
        return [dict(c) for c in self.comparisons.values() if c["user_id"] == user_id]

    async def get_comparison(self, comparison_id, user_id):
        comparison = self.comparisons.get(comparison_id)
        if comparison is None or comparison["user_id"] != user_id:
            return None
        return dict(comparison)

    async def save_comparison_analysis(self, comparison_id, user_id, ai_analysis):
        comparison = self.comparisons.get(comparison_id)
        if comparison is None:
            return False
        comparison["ai_analysis"] = ai_analysis
        return True

    async def get_comparison_owner(self, comparison_id):
        comparison = self.comparisons.get(comparison_id)
        return comparison["user_id"] if comparison else None

    async def update_comparison(self, comparison_id, title=None, description=None, property_ids=None):
        comparison = self.comparisons.get(comparison_id)
        if comparison is None:
            return None
        if title is not None:
            comparison["title"] = title
        if description is not None:
            comparison["description"] = description
        if property_ids is not None:
            comparison["property_ids"] = list(property_ids)
            comparison["ai_analysis"] = None
        return dict(comparison)

    async def delete_comparison(self, comparison_id):
        self.notes = [n for n in self.notes if n["comparison_id"] != comparison_id]
        return self.comparisons.pop(comparison_id, None) is not None

    async def add_comparison_note(self, comparison_id, note_text, property_id=None):
        note = {
            "id": str(uuid.uuid4()),
            "comparison_id": comparison_id,
            "property_id": property_id,
            "note_text": note_text,
            "created_at": "2026-10-18T11:00:00",
        }
        self.notes.append(note)
        return dict(note)

    async def get_comparison_notes(self, comparison_id):
        return [dict(n) for n in self.notes if n["comparison_id"] == comparison_id]


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def authed(store):
    app.dependency_overrides[current_user_id] = lambda: USER_ID
    app.dependency_overrides[get_store] = lambda: store
    yield store
    app.dependency_overrides.clear()


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_comparison_narrative(monkeypatch):
    calls = []

    async def mock_generate_comparison(properties, match_results, title=None):
        calls.append({"properties": len(properties), "title": title})
        return {"summary": "Söder wins", "recommendation": {"bestChoice": 0}}

    monkeypatch.setattr("listing_match.services.comparison_agent.generate_comparison", mock_generate_comparison)
    return calls


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def property_ids():
    return [p["id"] for p in PROPERTIES]
