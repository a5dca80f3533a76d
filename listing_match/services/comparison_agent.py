from langgraph.graph import StateGraph, END
from langchain_core.runnables import RunnableLambda
from pydantic import BaseModel
from structlog import get_logger
from typing import Any, Dict, List, Optional

from listing_match.schemas.matching import FeatureDefinition, MatchResult, UserRequirement
from listing_match.services.gemini import generate_comparison
from listing_match.services.matching import (
    build_match_table,
    compare_all,
    normalize_property,
    rank_by_percentage,
    requirements_from_records,
    summarize_match,
)

logger = get_logger()

MIN_PROPERTIES = 2


class ComparisonState(BaseModel):
    user_id: str
    property_ids: List[str]
    title: Optional[str] = None
    description: Optional[str] = None
    with_narrative: bool = True
    save: bool = False
    properties: List[Dict[str, Any]] = []
    catalog: List[FeatureDefinition] = []
    requirements: List[UserRequirement] = []
    match_results: List[MatchResult] = []
    ranking: List[int] = []
    summaries: List[Dict[str, List[str]]] = []
    match_table: List[Dict[str, Any]] = []
    narrative: Optional[Dict[str, Any]] = None
    comparison: Optional[Dict[str, Any]] = None


def property_labels(properties: List[Dict[str, Any]]) -> List[str]:
    return [f"{i}. {p.get('title') or p.get('id')}" for i, p in enumerate(properties, start=1)]


async def load_step(state: ComparisonState, config: Dict[str, Any]):
    store = config["configurable"]["store"]
    state.properties = await store.get_properties(state.property_ids, state.user_id)
    if len(state.properties) < MIN_PROPERTIES:
        raise ValueError(
            f"At least {MIN_PROPERTIES} saved properties are required, found {len(state.properties)}"
        )
    state.catalog = await store.get_feature_catalog()
    records = await store.get_user_requirements(state.user_id)
    state.requirements = requirements_from_records(records, state.catalog)
    logger.debug(
        "Comparison inputs loaded",
        user_id=state.user_id,
        properties=len(state.properties),
        requirements=len(state.requirements),
    )
    return state


async def match_step(state: ComparisonState, config: Dict[str, Any]):
    features = [normalize_property(p) for p in state.properties]
    state.match_results = compare_all(features, state.requirements, state.catalog)
    state.ranking = rank_by_percentage(state.match_results)
    state.summaries = [summarize_match(r) for r in state.match_results]
    table = build_match_table(state.match_results, property_labels(state.properties))
    state.match_table = table.reset_index(names="feature_id").to_dict(orient="records")
    return state


async def narrate_step(state: ComparisonState, config: Dict[str, Any]):
    if not state.with_narrative:
        logger.debug("Narrative skipped", user_id=state.user_id)
        return state
    state.narrative = await generate_comparison(state.properties, state.match_results, state.title)
    return state


async def persist_step(state: ComparisonState, config: Dict[str, Any]):
    if not state.save:
        return state
    store = config["configurable"]["store"]
    state.comparison = await store.create_comparison(
        user_id=state.user_id,
        title=state.title or "Comparison",
        description=state.description,
        property_ids=[p["id"] for p in state.properties],
        ai_analysis=state.narrative,
    )
    return state


async def run_comparison_agent(
    user_id: str,
    property_ids: List[str],
    store,
    title: Optional[str] = None,
    description: Optional[str] = None,
    with_narrative: bool = True,
    save: bool = False,
) -> ComparisonState:
    state = ComparisonState(
        user_id=user_id,
        property_ids=property_ids,
        title=title,
        description=description,
        with_narrative=with_narrative,
        save=save,
    )
    graph = StateGraph(ComparisonState)
    graph.add_node("load", RunnableLambda(load_step))
    graph.add_node("match", RunnableLambda(match_step))
    graph.add_node("narrate", RunnableLambda(narrate_step))
    graph.add_node("persist", RunnableLambda(persist_step))
    graph.add_edge("load", "match")
    graph.add_edge("match", "narrate")
    graph.add_edge("narrate", "persist")
    graph.add_edge("persist", END)
    graph.set_entry_point("load")
    compiled_graph = graph.compile()

    result = await compiled_graph.ainvoke(state, config={"configurable": {"store": store}})
    # langgraph hands back the channel values as a dict for pydantic state schemas
    if isinstance(result, dict):
        result = ComparisonState(**result)
    logger.info(
        "Comparison completed",
        user_id=user_id,
        properties=len(result.properties),
        best_match=result.ranking[0] if result.ranking else None,
        saved=result.comparison is not None,
    )
    return result
