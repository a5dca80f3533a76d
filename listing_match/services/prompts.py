from typing import Any, Dict, List, Sequence

from listing_match.schemas.matching import MatchResult
from listing_match.services.matching import describe_match_quality, summarize_match

# Qualitative attributes the analysis model grades 1-10
ATTRIBUTES = [
    ("light", "Amount of natural light in the home"),
    ("layout", "How well planned and functional the floor plan is"),
    ("condition", "General condition and need for renovation"),
    ("location", "Attractiveness of the area and proximity to services"),
    ("potential", "Potential for value increase or improvement"),
    ("kitchen", "Quality, size and functionality of the kitchen"),
    ("bathroom", "Quality, size and functionality of the bathroom"),
    ("storage", "Storage options in the home"),
    ("balcony", "Size, orientation and usability of the balcony (if any)"),
]


def _truncate(text: Any, limit: int = 300) -> str:
    text = str(text or "")
    return text if len(text) <= limit else text[:limit] + "..."


def _match_block(match_result: MatchResult | None) -> str:
    if match_result is None or match_result.max_score == 0:
        return "Preference match: the buyer has not set any weighted preferences."
    summary = summarize_match(match_result)
    return (
        f"Preference match: {match_result.percentage}% "
        f"({match_result.score}/{match_result.max_score} weighted points, "
        f"{describe_match_quality(match_result.percentage)})\n"
        f"- Meets: {', '.join(summary['strengths']) or 'none'}\n"
        f"- Misses: {', '.join(summary['weaknesses']) or 'none'}"
    )


def _property_block(property: Dict[str, Any]) -> str:
    lines = [
        f"Title: {property.get('title')}",
        f"Location: {property.get('location')}",
        f"Price: {property.get('price')}",
        f"Size: {property.get('size')}",
        f"Rooms: {property.get('rooms')}",
    ]
    if property.get("year_built"):
        lines.append(f"Year built: {property.get('year_built')}")
    if property.get("monthly_fee"):
        lines.append(f"Monthly fee: {property.get('monthly_fee')}")
    lines.append(f"Features: {', '.join(property.get('features') or []) or 'none listed'}")
    return "\n".join(lines)


def build_analysis_prompt(property: Dict[str, Any], match_result: MatchResult | None) -> str:
    attributes = "\n".join(f"- {name}: {description}" for name, description in ATTRIBUTES)
    return f"""
You are an experienced property valuer with expertise in residential property analysis.
Analyse the following property and grade each attribute from 1 to 10 with a short comment.

PROPERTY:
{_property_block(property)}

DESCRIPTION:
{property.get('description') or ''}

{_match_block(match_result)}

ATTRIBUTES TO GRADE (1-10):
{attributes}

Also give:
1. A short summary of the property (max 3 sentences), mentioning how well it fits the buyer's preferences
2. Three advantages
3. Three drawbacks or things to look into
4. An investment rating (1-10)
5. A value-for-money rating (1-10)

Answer ONLY with JSON in this format:
{{
  "summary": "Short summary",
  "totalScore": 7.5,
  "attributes": [{{"name": "light", "score": 8, "comment": "Large windows facing south"}}],
  "pros": ["Pro 1", "Pro 2", "Pro 3"],
  "cons": ["Con 1", "Con 2", "Con 3"],
  "investmentRating": 7,
  "valueForMoney": 6
}}
"""


def build_comparison_prompt(
    properties: Sequence[Dict[str, Any]],
    match_results: Sequence[MatchResult],
    title: str | None = None,
) -> str:
    blocks: List[str] = []
    for index, (property, match_result) in enumerate(zip(properties, match_results), start=1):
        blocks.append(
            f"PROPERTY {index}: {property.get('title')}\n"
            f"{_property_block(property)}\n"
            f"Description: {_truncate(property.get('description'))}\n"
            f"{_match_block(match_result)}"
        )
    heading = f"COMPARISON: {title}\n\n" if title else ""
    return f"""
You are an experienced property valuer comparing {len(properties)} properties for a buyer.
The preference match percentages are computed from the buyer's own weighted requirements; treat them as facts.

{heading}{chr(10).join(blocks)}

Give a detailed comparison that includes:
1. A summary of the most important differences
2. A comparison table with scores (1-10) per property for: value for money, location, condition, layout, potential, total value
3. Strengths and weaknesses of each property relative to the others, using the preference matches
4. A recommendation of the best choice and why
5. Key considerations when choosing between them

Answer ONLY with JSON in this format:
{{
  "summary": "Comparison summary",
  "comparisonTable": [
    {{"category": "Location", "description": "Short description", "scores": [{{"propertyIndex": 0, "score": 8, "comment": "Comment"}}]}}
  ],
  "propertyComparisons": [
    {{"propertyIndex": 0, "strengths": ["..."], "weaknesses": ["..."], "uniqueFeatures": ["..."]}}
  ],
  "recommendation": {{"bestChoice": 0, "reasoning": "Why"}},
  "keyConsiderations": ["Factor 1", "Factor 2"]
}}
"""
