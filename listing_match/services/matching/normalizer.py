"""
Turns an extracted listing record into the typed feature map the scorer reads.

Listing data arrives as free text (``"3.5 rum"``, ``"74 m²"``, ``"4 950 000 kr"``)
plus a list of feature tags. Numeric fields are reduced to their integer prefix,
amenity flags are derived by keyword search over the tags.
"""
import re
from typing import Any, Dict, Mapping, Optional

# canonical feature id -> keywords as they appear in listings (Swedish first)
FEATURE_KEYWORDS: Dict[str, tuple] = {
    "balcony": ("balkong", "balcony"),
    "elevator": ("hiss", "elevator"),
    "parking": ("parkering", "parking"),
    "garage": ("garage",),
    "garden": ("trädgård", "garden"),
    "renovated": ("renoverad", "renovated"),
    "fireplace": ("öppen spis", "fireplace"),
    "bathtub": ("badkar", "bathtub"),
    "dishwasher": ("diskmaskin", "dishwasher"),
    "laundry": ("tvättmaskin", "laundry"),
}

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
# thousands separators inside prices, no-break spaces included
_DIGIT_GROUP_SEP = re.compile(r"(?<=\d)\s(?=\d)")


def parse_int_prefix(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else 0


def parse_amount(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    match = _INT_PREFIX.match(_DIGIT_GROUP_SEP.sub("", str(value)))
    return int(match.group(1)) if match else None


def has_feature(tags, keywords) -> bool:
    lowered = [str(tag).lower() for tag in tags or [] if tag is not None]
    return any(keyword in tag for tag in lowered for keyword in keywords)


def normalize_property(record: Mapping[str, Any]) -> Dict[str, Any]:
    tags = record.get("features") or []
    features: Dict[str, Any] = {
        "rooms": parse_int_prefix(record.get("rooms")),
        "size": parse_int_prefix(record.get("size")),
        "price": parse_amount(record.get("price")),
        "monthly_fee": parse_amount(record.get("monthly_fee", record.get("monthlyFee"))),
        "location": str(record["location"]) if record.get("location") else None,
    }
    for feature_id, keywords in FEATURE_KEYWORDS.items():
        features[feature_id] = has_feature(tags, keywords)
    return features
