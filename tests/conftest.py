from __future__ import annotations

from typing import Dict, List

import pytest

from review_core.filters import FilterBroker
from review_core.normalize import normalize_reviews


def _airline_row(name: str, overall, date: str = "2015-04-10", **ratings) -> Dict[str, object]:
    row: Dict[str, object] = {
        "airline_name": name,
        "overall_rating": overall,
        "author_country": "United Kingdom",
        "date": date,
        "recommended": "1",
    }
    row.update(ratings)
    return row


@pytest.fixture
def airline_rows() -> List[Dict[str, object]]:
    return [
        _airline_row("ExampleAir", "8", seat_comfort_rating="4", value_money_rating="4", cabin_staff_rating="5"),
        _airline_row("ExampleAir", "6", "2015-05-02", seat_comfort_rating="5", value_money_rating="3", cabin_staff_rating="3"),
        _airline_row("ExampleAir", "7", "2016-04-21", seat_comfort_rating="", value_money_rating="4", recommended="0"),
        _airline_row("OtherJet", "4", "2012-04-03", seat_comfort_rating="2", value_money_rating="2"),
        _airline_row("OtherJet", "0", seat_comfort_rating="3"),
        _airline_row("", "9", seat_comfort_rating="5"),
    ]


@pytest.fixture
def airport_rows() -> List[Dict[str, object]]:
    return [
        {"airport_name": "Heathrow", "overall_rating": "6", "author_country": "France", "date": "2015-04-12",
         "terminal_cleanliness_rating": "4", "airport_staff_rating": "3", "queuing_rating": "2"},
        {"airport_name": "Heathrow", "overall_rating": "8", "author_country": "Germany", "date": "2015-05-01",
         "terminal_cleanliness_rating": "5", "airport_staff_rating": "", "queuing_rating": "4"},
        {"airport_name": "Schiphol", "overall_rating": "9", "author_country": "France", "date": "not a date",
         "terminal_cleanliness_rating": "5"},
    ]


@pytest.fixture
def lounge_rows() -> List[Dict[str, object]]:
    return [
        {"lounge_name": "Galleries Club", "airport": "Heathrow", "overall_rating": "4", "author_country": "France",
         "date": "2015-04-20", "comfort_rating": "4", "cleanliness_rating": "5", "staff_service_rating": "4"},
        {"lounge_name": "Aspire", "airport": "Schiphol", "overall_rating": "3", "author_country": "Spain",
         "date": "2016-04-02", "comfort_rating": "0", "cleanliness_rating": "3"},
    ]


@pytest.fixture
def data_ctx(airline_rows, airport_rows, lounge_rows) -> Dict[str, object]:
    return {
        "files": ["airline.csv", "airport.csv", "lounge.csv"],
        "airline": normalize_reviews(airline_rows, "airline"),
        "airport": normalize_reviews(airport_rows, "airport"),
        "lounge": normalize_reviews(lounge_rows, "lounge"),
        "errors": {},
        "error": None,
        "loaded": 3,
    }


@pytest.fixture
def broker() -> FilterBroker:
    return FilterBroker()
