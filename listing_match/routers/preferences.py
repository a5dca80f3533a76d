from collections import Counter

from fastapi import APIRouter, Depends, HTTPException
from structlog import get_logger

from listing_match.dependencies.auth import current_user_id
from listing_match.dependencies.store import get_store
from listing_match.schemas.api import FeatureCatalogResponse, PreferencesResponse, PreferencesUpdateRequest
from listing_match.services.matching import (
    coerce_value,
    requirements_from_records,
    resolve_preference_value,
    value_fits_feature,
)
from listing_match.services.store import PropertyStore

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["preferences"])


@router.get("/features", response_model=FeatureCatalogResponse)
async def list_features(user_id: str = Depends(current_user_id), store: PropertyStore = Depends(get_store)):
    try:
        catalog = await store.get_feature_catalog()
    except Exception as e:
        logger.error("Feature catalog fetch failed", user_id=user_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not load the feature catalog")
    return FeatureCatalogResponse(features=catalog)


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(user_id: str = Depends(current_user_id), store: PropertyStore = Depends(get_store)):
    try:
        catalog = await store.get_feature_catalog()
        records = await store.get_user_requirements(user_id)
    except Exception as e:
        logger.error("Preference fetch failed", user_id=user_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not load your preferences")
    return PreferencesResponse(requirements=requirements_from_records(records, catalog))


@router.put("/preferences", response_model=PreferencesResponse)
async def replace_preferences(
    request: PreferencesUpdateRequest,
    user_id: str = Depends(current_user_id),
    store: PropertyStore = Depends(get_store),
):
    try:
        catalog = {feature.id: feature for feature in await store.get_feature_catalog()}
    except Exception as e:
        logger.error("Feature catalog fetch failed", user_id=user_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not load the feature catalog")

    unknown = sorted({r.feature_id for r in request.requirements if r.feature_id not in catalog})
    if unknown:
        raise HTTPException(status_code=422, detail=f"Unknown features: {', '.join(unknown)}")
    counts = Counter(r.feature_id for r in request.requirements)
    duplicated = sorted(feature_id for feature_id, count in counts.items() if count > 1)
    if duplicated:
        raise HTTPException(status_code=422, detail=f"Duplicate features: {', '.join(duplicated)}")

    requirements = [
        r.model_copy(update={"value": coerce_value(resolve_preference_value(r.value), catalog[r.feature_id])})
        for r in request.requirements
    ]
    misshapen = sorted(r.feature_id for r in requirements if not value_fits_feature(r.value, catalog[r.feature_id]))
    if misshapen:
        raise HTTPException(status_code=422, detail=f"Values do not fit the feature type: {', '.join(misshapen)}")
    try:
        await store.replace_user_requirements(user_id, requirements)
    except Exception as e:
        logger.error("Preference save failed", user_id=user_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not save your preferences")
    logger.info("Preferences saved", user_id=user_id, count=len(requirements))
    return PreferencesResponse(requirements=requirements)
