from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from structlog import get_logger

from listing_match.dependencies.auth import current_user_id
from listing_match.dependencies.rate_limit import llm_rate_limit
from listing_match.dependencies.store import get_store
from listing_match.schemas.api import (
    ComparedProperty,
    ComparisonNoteRequest,
    ComparisonNoteResponse,
    ComparisonRequest,
    ComparisonResponse,
    ComparisonSummary,
    SaveComparisonRequest,
    UpdateComparisonRequest,
)
from listing_match.services.comparison_agent import ComparisonState, run_comparison_agent
from listing_match.services.matching import describe_match_quality
from listing_match.services.store import PropertyStore

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["comparisons"])


def _response(
    state: ComparisonState,
    comparison_id: Optional[str] = None,
    narrative=None,
    notes: Optional[List[dict]] = None,
) -> ComparisonResponse:
    properties = []
    for prop, result, summary in zip(state.properties, state.match_results, state.summaries):
        properties.append(
            ComparedProperty(
                id=str(prop["id"]),
                title=prop.get("title"),
                location=prop.get("location"),
                price=prop.get("price"),
                match_result=result,
                quality=describe_match_quality(result.percentage),
                strengths=summary["strengths"],
                weaknesses=summary["weaknesses"],
            )
        )
    return ComparisonResponse(
        comparison_id=comparison_id or (state.comparison or {}).get("id"),
        title=state.title,
        properties=properties,
        ranking=state.ranking,
        match_table=state.match_table,
        narrative=narrative if narrative is not None else state.narrative,
        notes=notes or [],
    )


async def _run(user_id: str, property_ids: List[str], store: PropertyStore, **kwargs) -> ComparisonState:
    try:
        return await run_comparison_agent(user_id=user_id, property_ids=property_ids, store=store, **kwargs)
    except ValueError as ve:
        logger.error("Comparison rejected", user_id=user_id, property_ids=property_ids, error=str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error("Comparison failed", user_id=user_id, property_ids=property_ids, error=str(e))
        raise HTTPException(status_code=500, detail="Comparison failed")


@router.post("/comparisons/preview", response_model=ComparisonResponse, dependencies=[Depends(llm_rate_limit)])
async def preview_comparison(
    request: ComparisonRequest,
    user_id: str = Depends(current_user_id),
    store: PropertyStore = Depends(get_store),
):
    state = await _run(
        user_id,
        request.property_ids,
        store,
        title=request.title,
        with_narrative=request.with_narrative,
    )
    return _response(state)


@router.post("/comparisons", response_model=ComparisonResponse, dependencies=[Depends(llm_rate_limit)])
async def create_comparison(
    request: SaveComparisonRequest,
    user_id: str = Depends(current_user_id),
    store: PropertyStore = Depends(get_store),
):
    state = await _run(
        user_id,
        request.property_ids,
        store,
        title=request.title,
        description=request.description,
        with_narrative=request.with_narrative,
        save=True,
    )
    return _response(state)


def _summary(comparison: dict) -> ComparisonSummary:
    return ComparisonSummary(
        id=comparison["id"],
        title=comparison["title"],
        description=comparison.get("description"),
        property_ids=comparison["property_ids"],
        has_analysis=bool(comparison.get("ai_analysis")),
        created_at=comparison.get("created_at"),
        last_viewed_at=comparison.get("last_viewed_at"),
    )


@router.get("/comparisons", response_model=List[ComparisonSummary])
async def list_comparisons(user_id: str = Depends(current_user_id), store: PropertyStore = Depends(get_store)):
    try:
        comparisons = await store.list_comparisons(user_id)
    except Exception as e:
        logger.error("Comparison list failed", user_id=user_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not load your comparisons")
    return [_summary(c) for c in comparisons]


async def _load_comparison(comparison_id: str, user_id: str, store: PropertyStore) -> dict:
    """Returns the caller's comparison; 404 when it does not exist, 403 when someone else owns it."""
    try:
        owner = await store.get_comparison_owner(comparison_id)
        owned = owner is not None and owner.lower() == user_id.lower()
        comparison = await store.get_comparison(comparison_id, user_id) if owned else None
    except Exception as e:
        logger.error("Comparison fetch failed", user_id=user_id, comparison_id=comparison_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not load the comparison")
    if owner is None:
        raise HTTPException(status_code=404, detail="Comparison not found")
    if comparison is None:
        logger.warning("Comparison access denied", user_id=user_id, comparison_id=comparison_id)
        raise HTTPException(status_code=403, detail="Not allowed to access this comparison")
    return comparison


async def _load_notes(comparison_id: str, store: PropertyStore) -> List[dict]:
    try:
        return await store.get_comparison_notes(comparison_id)
    except Exception as e:
        # the comparison is still returned, without notes
        logger.warning("Comparison notes fetch failed", comparison_id=comparison_id, error=str(e))
        return []


@router.get("/comparisons/{comparison_id}", response_model=ComparisonResponse)
async def get_comparison(
    comparison_id: str,
    user_id: str = Depends(current_user_id),
    store: PropertyStore = Depends(get_store),
):
    comparison = await _load_comparison(comparison_id, user_id, store)
    # match results are recomputed so they follow the user's current preferences
    state = await _run(
        user_id,
        comparison["property_ids"],
        store,
        title=comparison["title"],
        with_narrative=False,
    )
    notes = await _load_notes(comparison["id"], store)
    return _response(state, comparison_id=comparison["id"], narrative=comparison.get("ai_analysis"), notes=notes)


@router.put("/comparisons/{comparison_id}", response_model=ComparisonSummary)
async def update_comparison(
    comparison_id: str,
    request: UpdateComparisonRequest,
    user_id: str = Depends(current_user_id),
    store: PropertyStore = Depends(get_store),
):
    comparison = await _load_comparison(comparison_id, user_id, store)
    if request.property_ids is not None:
        if len(set(request.property_ids)) != len(request.property_ids):
            raise HTTPException(status_code=422, detail="Each property can only be compared once")
        try:
            found = await store.get_properties(request.property_ids, user_id)
        except Exception as e:
            logger.error("Comparison properties fetch failed", user_id=user_id, comparison_id=comparison_id, error=str(e))
            raise HTTPException(status_code=500, detail="Could not load the properties")
        missing = sorted(set(request.property_ids) - {p["id"] for p in found})
        if missing:
            raise HTTPException(status_code=400, detail=f"Unknown properties: {', '.join(missing)}")

    try:
        updated = await store.update_comparison(
            comparison["id"],
            title=request.title,
            description=request.description,
            property_ids=request.property_ids,
        )
    except Exception as e:
        logger.error("Comparison update failed", user_id=user_id, comparison_id=comparison_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not update the comparison")
    if updated is None:
        raise HTTPException(status_code=404, detail="Comparison not found")
    logger.info("Comparison updated", user_id=user_id, comparison_id=comparison_id)
    return _summary(updated)


@router.delete("/comparisons/{comparison_id}", status_code=204)
async def delete_comparison(
    comparison_id: str,
    user_id: str = Depends(current_user_id),
    store: PropertyStore = Depends(get_store),
):
    comparison = await _load_comparison(comparison_id, user_id, store)
    try:
        await store.delete_comparison(comparison["id"])
    except Exception as e:
        logger.error("Comparison delete failed", user_id=user_id, comparison_id=comparison_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not delete the comparison")
    logger.info("Comparison deleted", user_id=user_id, comparison_id=comparison_id)
    return Response(status_code=204)


@router.post("/comparisons/{comparison_id}/notes", response_model=ComparisonNoteResponse)
async def add_comparison_note(
    comparison_id: str,
    request: ComparisonNoteRequest,
    user_id: str = Depends(current_user_id),
    store: PropertyStore = Depends(get_store),
):
    comparison = await _load_comparison(comparison_id, user_id, store)
    if request.property_id and request.property_id not in comparison["property_ids"]:
        raise HTTPException(status_code=400, detail="Property is not part of this comparison")
    try:
        note = await store.add_comparison_note(comparison["id"], request.note_text, request.property_id)
    except Exception as e:
        logger.error("Comparison note save failed", user_id=user_id, comparison_id=comparison_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not save the note")
    return note


@router.post(
    "/comparisons/{comparison_id}/analyze",
    response_model=ComparisonResponse,
    dependencies=[Depends(llm_rate_limit)],
)
async def analyze_comparison(
    comparison_id: str,
    force: bool = False,
    user_id: str = Depends(current_user_id),
    store: PropertyStore = Depends(get_store),
):
    comparison = await _load_comparison(comparison_id, user_id, store)
    has_narrative = bool(comparison.get("ai_analysis")) and not force
    state = await _run(
        user_id,
        comparison["property_ids"],
        store,
        title=comparison["title"],
        with_narrative=not has_narrative,
    )
    if has_narrative:
        return _response(state, comparison_id=comparison["id"], narrative=comparison["ai_analysis"])

    try:
        await store.save_comparison_analysis(comparison["id"], user_id, state.narrative)
    except Exception as e:
        logger.error("Comparison analysis save failed", user_id=user_id, comparison_id=comparison_id, error=str(e))
        raise HTTPException(status_code=500, detail="Could not save the comparison analysis")
    return _response(state, comparison_id=comparison["id"])
