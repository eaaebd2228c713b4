from __future__ import annotations

import math

import pandas as pd
import pytest

from review_core.summaries import (
    aggregate_by_country,
    aggregate_by_month,
    airline_ratings,
    airports_with_lounges,
    country_ratings,
    top_entities,
)


def test_top_entities_ranks_by_review_count(data_ctx):
    assert top_entities(data_ctx["airline"], 20) == [("ExampleAir", 3), ("OtherJet", 1)]
    assert top_entities(data_ctx["airline"], 1) == [("ExampleAir", 3)]
    assert top_entities(pd.DataFrame(), 5) == []


def test_aggregate_by_country(data_ctx):
    out = aggregate_by_country(data_ctx["airline"])

    assert out["country"].tolist() == ["United Kingdom"]
    assert out["count"].tolist() == [4]
    assert out["overall_rating"].iloc[0] == pytest.approx(6.25)


def test_aggregate_by_month_skips_undated_records(data_ctx):
    out = aggregate_by_month(data_ctx["airport"])

    assert out["month"].tolist() == [pd.Timestamp("2015-04-01"), pd.Timestamp("2015-05-01")]
    assert out["count"].tolist() == [1, 1]


def test_airline_ratings_applies_minimum(data_ctx):
    assert airline_ratings(data_ctx["airline"]).empty

    out = airline_ratings(data_ctx["airline"], min_reviews=1)

    assert out["entity_name"].tolist() == ["ExampleAir", "OtherJet"]
    assert out["value_money_rating"].iloc[0] == pytest.approx((8 + 6 + 8) / 3)
    assert math.isnan(out["wifi_connectivity_rating"].iloc[0])


def test_airports_with_lounges(data_ctx):
    out = {row["name"]: row for row in airports_with_lounges(data_ctx["airport"], data_ctx["lounge"])}

    heathrow = out["Heathrow"]
    assert heathrow["airport"]["count"] == 2
    assert heathrow["airport"]["avg_rating"] == pytest.approx(7.0)
    assert heathrow["airport"]["avg_cleanliness"] == pytest.approx(9.0)
    assert heathrow["lounges"]["count"] == 1
    assert heathrow["lounges"]["avg_rating"] == pytest.approx(8.0)
    assert heathrow["lounges"]["lounges"] == [
        {"name": "Galleries Club", "rating": 8.0, "comfort": 8.0, "cleanliness": 10.0, "staff": 8.0}
    ]
    assert out["Schiphol"]["lounges"]["lounges"][0]["comfort"] is None


def test_airport_without_lounges_has_empty_lounge_side(data_ctx):
    out = airports_with_lounges(data_ctx["airport"], data_ctx["lounge"].iloc[0:0])

    assert all(row["lounges"] == {"count": 0, "avg_rating": None, "lounges": []} for row in out)


def test_country_ratings_weights_by_review_count(data_ctx):
    out = country_ratings(data_ctx["airport"], data_ctx["lounge"]).set_index("country")

    france = out.loc["France"]
    assert france["airport_count"] == 2
    assert france["lounge_count"] == 1
    assert france["combined_rating"] == pytest.approx((7.5 * 2 + 8.0 * 1) / 3)

    spain = out.loc["Spain"]
    assert spain["airport_count"] == 0
    assert math.isnan(spain["avg_airport_rating"])
    assert spain["combined_rating"] == pytest.approx(6.0)

    assert list(out.index) == ["France", "Germany", "Spain"]
