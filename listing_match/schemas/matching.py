import enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

# index label of the closing row in the side-by-side match table
MATCH_TABLE_TOTAL_ROW = "percentage"


class FeatureType(str, enum.Enum):
    number = "number"
    boolean = "boolean"
    select = "select"


class CamelModel(BaseModel):
    # snake_case attributes, camelCase on the wire; both accepted on input
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class FeatureDefinition(CamelModel):
    id: str
    label: str
    type: FeatureType
    options: Optional[List[str]] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    @model_validator(mode="after")
    def check_definition(self):
        if self.id == MATCH_TABLE_TOTAL_ROW:
            raise ValueError(f"'{MATCH_TABLE_TOTAL_ROW}' is reserved and cannot be a feature id")
        if self.type == FeatureType.select and not self.options:
            raise ValueError(f"select feature '{self.id}' needs at least one option")
        if self.type != FeatureType.select and self.options:
            raise ValueError(f"only select features take options, got some for '{self.id}'")
        return self


class UserRequirement(CamelModel):
    feature_id: str
    value: Any = None
    importance: int = Field(default=0, ge=0, le=4)


class FeatureMatch(CamelModel):
    matched: bool
    importance: int
    feature_label: str


class MatchResult(CamelModel):
    score: int = 0
    max_score: int = 0
    percentage: int = 0
    matches: Dict[str, FeatureMatch] = {}

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "score": 4,
                "maxScore": 6,
                "percentage": 67,
                "matches": {
                    "balcony": {"matched": True, "importance": 4, "featureLabel": "Balkong"},
                    "rooms": {"matched": False, "importance": 2, "featureLabel": "Antal rum"},
                },
            }
        }
