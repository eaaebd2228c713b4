from __future__ import annotations

import pytest

from review_core.aggregate import aggregate
from review_core.config import ENTITY_TYPES
from review_core.dimensions import DIMENSIONS, get_dimension, has_data, rating_column, resolve
from review_core.errors import UnknownDimensionError
from review_core.normalize import RATING_SCALES, normalize_reviews


def test_registry_keys_and_labels():
    assert [d.key for d in DIMENSIONS] == ["comfort", "staff", "food", "cleanliness", "overall"]
    assert [d.label for d in DIMENSIONS] == ["Comfort", "Staff", "Food", "Cleanliness", "Overall"]


@pytest.mark.parametrize(
    "dimension_key,entity_type,expected",
    [
        ("comfort", "airline", "seat_comfort_rating"),
        ("comfort", "airport", None),
        ("comfort", "lounge", "comfort_rating"),
        ("staff", "airport", "airport_staff_rating"),
        ("staff", "lounge", "staff_service_rating"),
        ("food", "lounge", "catering_rating"),
        ("cleanliness", "airline", None),
        ("cleanliness", "airport", "terminal_cleanliness_rating"),
        ("overall", "lounge", "overall_rating"),
    ],
)
def test_resolve(dimension_key, entity_type, expected):
    spec = resolve(dimension_key, entity_type)

    if expected is None:
        assert spec is None
        assert not has_data(dimension_key, entity_type)
    else:
        assert spec.field == expected
        assert has_data(dimension_key, entity_type)


def test_every_field_is_a_known_rating_column_with_its_multiplier():
    for dim in DIMENSIONS:
        for entity_type in ENTITY_TYPES:
            spec = dim.field_for(entity_type)
            if spec is None:
                continue
            assert spec.field in RATING_SCALES[entity_type]
            assert spec.multiplier == 10 / RATING_SCALES[entity_type][spec.field]


def test_lounge_overall_multiplier_is_two():
    assert resolve("overall", "lounge").multiplier == 2.0
    assert resolve("overall", "airline").multiplier == 1.0


def test_absent_cell_aggregates_to_null_mean_without_raising(airline_rows):
    records = normalize_reviews(airline_rows, "airline")
    assert rating_column("cleanliness", "airline") is None

    out = aggregate(records, "entity_name", ["cleanliness"])

    assert [a.key for a in out] == ["ExampleAir", "OtherJet"]
    assert all(a.mean == {"cleanliness": None} for a in out)
    assert all(not a.has_data("cleanliness") for a in out)


def test_rating_column_without_dimension_is_overall():
    assert rating_column(None, "airport") == "overall_rating"
    assert rating_column(get_dimension("food"), "lounge") == "catering_rating"


def test_unknown_dimension_raises():
    with pytest.raises(UnknownDimensionError):
        get_dimension("legroom")
    with pytest.raises(KeyError):
        resolve("legroom", "airline")
