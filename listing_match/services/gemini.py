import asyncio
import json
import re
from typing import Any, Dict, Optional, Sequence

import google.generativeai as genai
from pybreaker import CircuitBreaker, CircuitBreakerError
from structlog import get_logger

from listing_match.config import settings
from listing_match.schemas.matching import MatchResult
from listing_match.services.prompts import ATTRIBUTES, build_analysis_prompt, build_comparison_prompt
from listing_match.utils.retry import retry_api

logger = get_logger()
breaker = CircuitBreaker(fail_max=3, reset_timeout=60)

genai.configure(api_key=settings.GEMINI_API_KEY)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


@breaker
def _generate(model_name: str, prompt: str) -> str:
    model = genai.GenerativeModel(model_name)
    response = model.generate_content(prompt)
    return response.text


@retry_api(tries=2, delay=1, backoff=2, no_retry_on=(CircuitBreakerError,))
async def _call_model(model_name: str, prompt: str) -> str:
    return await asyncio.to_thread(_generate, model_name, prompt)


async def generate_text(prompt: str) -> Optional[str]:
    # Prefer the configured model, fall back to the older one if it is unavailable
    for model_name in (settings.GEMINI_MODEL, settings.GEMINI_FALLBACK_MODEL):
        try:
            return await _call_model(model_name, prompt)
        except Exception as e:
            logger.error("Gemini API failed", model=model_name, error=str(e))
    return None


def extract_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    if not text:
        return None
    match = _JSON_OBJECT.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def fallback_analysis() -> Dict[str, Any]:
    return {
        "summary": "The property could not be analysed automatically.",
        "totalScore": 5,
        "attributes": [
            {"name": name, "score": 5, "comment": "No analysis available"} for name, _ in ATTRIBUTES
        ],
        "pros": ["No automatic analysis available"],
        "cons": ["No automatic analysis available"],
        "investmentRating": 5,
        "valueForMoney": 5,
    }


def fallback_comparison(property_count: int) -> Dict[str, Any]:
    return {
        "summary": "The comparison could not be analysed automatically.",
        "comparisonTable": [
            {
                "category": "Total value",
                "description": "Overall assessment",
                "scores": [
                    {"propertyIndex": i, "score": 5, "comment": "No analysis available"}
                    for i in range(property_count)
                ],
            }
        ],
        "propertyComparisons": [
            {
                "propertyIndex": i,
                "strengths": ["No automatic analysis available"],
                "weaknesses": ["No automatic analysis available"],
                "uniqueFeatures": [],
            }
            for i in range(property_count)
        ],
        "recommendation": {"bestChoice": None, "reasoning": "No automatic recommendation could be made"},
        "keyConsiderations": ["Compare the properties manually"],
    }


async def generate_property_analysis(property: Dict[str, Any], match_result: MatchResult | None) -> Dict[str, Any]:
    text = await generate_text(build_analysis_prompt(property, match_result))
    analysis = extract_json(text)
    if analysis is None:
        logger.warning("Property analysis unavailable, using fallback", property_id=property.get("id"))
        return fallback_analysis()
    return analysis


async def generate_comparison(
    properties: Sequence[Dict[str, Any]],
    match_results: Sequence[MatchResult],
    title: str | None = None,
) -> Dict[str, Any]:
    text = await generate_text(build_comparison_prompt(properties, match_results, title))
    comparison = extract_json(text)
    if comparison is None:
        logger.warning("Comparison narrative unavailable, using fallback", properties=len(properties))
        return fallback_comparison(len(properties))
    return comparison
