import pytest

from listing_match.services.matching import FEATURE_KEYWORDS, normalize_property, parse_amount, parse_int_prefix


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("3 rum", 3),
        ("3.5 rum", 3),
        ("74 m²", 74),
        (" 12", 12),
        (4, 4),
        ("rum 3", 0),
        ("", 0),
        (None, 0),
    ],
)
def test_parse_int_prefix(raw, expected):
    assert parse_int_prefix(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("4 950 000 kr", 4950000),
        ("4\u00a0950\u00a0000 kr", 4950000),
        ("3 400 kr/mån", 3400),
        (2100000, 2100000),
        ("Pris saknas", None),
        (None, None),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_normalize_property_reads_numbers_and_location():
    features = normalize_property({
        "rooms": "3.5 rum",
        "size": "74 m²",
        "price": "4 950 000 kr",
        "monthly_fee": "3 400 kr/mån",
        "location": "Södermalm, Stockholm",
        "features": [],
    })
    assert features["rooms"] == 3
    assert features["size"] == 74
    assert features["price"] == 4950000
    assert features["monthly_fee"] == 3400
    assert features["location"] == "Södermalm, Stockholm"


def test_normalize_property_accepts_camel_case_fee():
    assert normalize_property({"monthlyFee": "2 500 kr"})["monthly_fee"] == 2500


def test_amenity_flags_from_tags():
    features = normalize_property({"features": ["Balkong i söderläge", "Diskmaskin", "ÖPPEN SPIS"]})
    assert features["balcony"] is True
    assert features["dishwasher"] is True
    assert features["fireplace"] is True
    assert features["elevator"] is False
    assert features["garage"] is False


def test_missing_fields_normalize_to_defaults():
    features = normalize_property({})
    assert features["rooms"] == 0
    assert features["size"] == 0
    assert features["price"] is None
    assert features["monthly_fee"] is None
    assert features["location"] is None
    assert all(features[flag] is False for flag in FEATURE_KEYWORDS)


def test_non_string_tags_are_tolerated():
    features = normalize_property({"features": [None, 42, "Hiss"]})
    assert features["elevator"] is True
