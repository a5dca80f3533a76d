from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from structlog import get_logger

from listing_match.dependencies.auth import current_user_id
from listing_match.dependencies.rate_limit import llm_rate_limit
from listing_match.dependencies.store import get_store
from listing_match.schemas.api import PreferenceMatchResponse, PropertyAnalysisResponse
from listing_match.schemas.matching import MatchResult
from listing_match.services.gemini import generate_property_analysis
from listing_match.services.matching import (
    describe_match_quality,
    normalize_property,
    requirements_from_records,
    score_property,
)
from listing_match.services.store import PropertyStore

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["properties"])


async def _match_property(property_id: str, user_id: str, store: PropertyStore):
    try:
        prop = await store.get_property(property_id, user_id)
        if prop is None:
            raise HTTPException(status_code=404, detail="Property not found")
        catalog = await store.get_feature_catalog()
        records = await store.get_user_requirements(user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Match inputs fetch failed", user_id=user_id, property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not load the property or your preferences")
    features = normalize_property(prop)
    result = score_property(features, requirements_from_records(records, catalog), catalog)
    return prop, features, result


def _analysis_record(analysis: Dict[str, Any], match_result: MatchResult) -> Dict[str, Any]:
    # model output is camelCase, the analysis table is snake_case
    return {
        "analysis_summary": analysis.get("summary"),
        "total_score": analysis.get("totalScore"),
        "attribute_scores": analysis.get("attributes") or [],
        "pros": analysis.get("pros") or [],
        "cons": analysis.get("cons") or [],
        "investment_rating": analysis.get("investmentRating"),
        "value_for_money": analysis.get("valueForMoney"),
        "preference_match": match_result.model_dump(by_alias=True),
    }


@router.get("/properties/{property_id}/preference-match", response_model=PreferenceMatchResponse)
async def get_preference_match(
    property_id: str,
    user_id: str = Depends(current_user_id),
    store: PropertyStore = Depends(get_store),
):
    prop, features, result = await _match_property(property_id, user_id, store)
    saved = False
    if prop.get("is_analyzed"):
        try:
            saved = await store.save_preference_match(property_id, result)
        except Exception as e:
            # the score is still valid without the snapshot
            logger.warning("Could not embed match in analysis", property_id=property_id, error=str(e))
    logger.info("Preference match calculated", user_id=user_id, property_id=property_id, percentage=result.percentage)
    return PreferenceMatchResponse(
        property_id=property_id,
        property_features=features,
        match_result=result,
        quality=describe_match_quality(result.percentage),
        saved_to_analysis=saved,
    )


@router.post(
    "/properties/{property_id}/analyze",
    response_model=PropertyAnalysisResponse,
    dependencies=[Depends(llm_rate_limit)],
)
async def analyze_property(
    property_id: str,
    force: bool = False,
    user_id: str = Depends(current_user_id),
    store: PropertyStore = Depends(get_store),
):
    prop, _, result = await _match_property(property_id, user_id, store)
    quality = describe_match_quality(result.percentage)

    if prop.get("is_analyzed") and not force:
        existing = await store.get_analysis(property_id)
        if existing:
            return PropertyAnalysisResponse(
                property_id=property_id,
                already_analyzed=True,
                analysis=existing,
                match_result=result,
                quality=quality,
            )

    analysis = await generate_property_analysis(prop, result)
    try:
        saved = await store.save_analysis(property_id, user_id, _analysis_record(analysis, result))
    except Exception as e:
        logger.error("Analysis save failed", user_id=user_id, property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not save the analysis")
    logger.info("Property analysed", user_id=user_id, property_id=property_id, percentage=result.percentage)
    return PropertyAnalysisResponse(
        property_id=property_id,
        analysis=saved,
        match_result=result,
        quality=quality,
    )
