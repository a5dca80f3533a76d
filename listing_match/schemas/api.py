from typing import Any, Dict, List, Optional

from pydantic import Field

from listing_match.schemas.matching import CamelModel, FeatureDefinition, MatchResult, UserRequirement


class PreferencesUpdateRequest(CamelModel):
    requirements: List[UserRequirement]

    class Config:
        json_schema_extra = {
            "example": {
                "requirements": [
                    {"featureId": "balcony", "value": True, "importance": 4},
                    {"featureId": "rooms", "value": {"min": 2, "max": 4}, "importance": 3},
                    {"featureId": "location", "value": "Södermalm", "importance": 2},
                ]
            }
        }


class PreferencesResponse(CamelModel):
    requirements: List[UserRequirement]


class FeatureCatalogResponse(CamelModel):
    features: List[FeatureDefinition]


class PreferenceMatchResponse(CamelModel):
    property_id: str
    property_features: Dict[str, Any]
    match_result: MatchResult
    quality: str
    saved_to_analysis: bool = False


class PropertyAnalysisResponse(CamelModel):
    property_id: str
    already_analyzed: bool = False
    analysis: Dict[str, Any]
    match_result: MatchResult
    quality: str


class ComparisonRequest(CamelModel):
    property_ids: List[str] = Field(min_length=2)
    title: Optional[str] = None
    description: Optional[str] = None
    with_narrative: bool = True


class SaveComparisonRequest(ComparisonRequest):
    title: str = Field(min_length=1, max_length=255)


class ComparedProperty(CamelModel):
    id: str
    title: Optional[str] = None
    location: Optional[str] = None
    price: Optional[str] = None
    match_result: MatchResult
    quality: str
    strengths: List[str] = []
    weaknesses: List[str] = []


class ComparisonNoteResponse(CamelModel):
    id: str
    comparison_id: str
    property_id: Optional[str] = None
    note_text: str
    created_at: Optional[str] = None


class ComparisonResponse(CamelModel):
    comparison_id: Optional[str] = None
    title: Optional[str] = None
    properties: List[ComparedProperty]
    ranking: List[int]
    match_table: List[Dict[str, Any]]
    narrative: Optional[Dict[str, Any]] = None
    notes: List[ComparisonNoteResponse] = []


class ComparisonSummary(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    property_ids: List[str]
    has_analysis: bool
    created_at: Optional[str] = None
    last_viewed_at: Optional[str] = None


class UpdateComparisonRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    property_ids: Optional[List[str]] = Field(default=None, min_length=2)


class ComparisonNoteRequest(CamelModel):
    note_text: str = Field(min_length=1)
    property_id: Optional[str] = None
