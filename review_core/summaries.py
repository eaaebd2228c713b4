"""Secondary review aggregates built on the grouping engine.

`top_entities` feeds the airline picker and `country_ratings` the country
table. The others are library API for notebooks and scripts.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd

from review_core.aggregate import aggregate_frame, optional_float
from review_core.config import MIN_AIRLINE_REVIEWS_DEFAULT
from review_core.normalize import OVERALL_FIELD, rating_fields

AIRPORT_DETAIL_FIELDS = [OVERALL_FIELD, "queuing_rating", "terminal_cleanliness_rating", "airport_shopping_rating"]
LOUNGE_MEMBER_FIELDS = {
    "rating": OVERALL_FIELD,
    "comfort": "comfort_rating",
    "cleanliness": "cleanliness_rating",
    "staff": "staff_service_rating",
}


def top_entities(records: pd.DataFrame, n: int = 10) -> List[Tuple[str, int]]:
    """Entity names ranked by review count (ties broken by name)."""
    counts = aggregate_frame(records, "entity_name")
    if counts.empty:
        return []
    counts = counts.sort_values(["count", "entity_name"], ascending=[False, True]).head(max(1, int(n)))
    return [(str(name), int(count)) for name, count in zip(counts["entity_name"], counts["count"])]


def aggregate_by_country(records: pd.DataFrame) -> pd.DataFrame:
    return aggregate_frame(records, "country", [OVERALL_FIELD, "seat_comfort_rating", "cabin_staff_rating"])


def aggregate_by_month(records: pd.DataFrame) -> pd.DataFrame:
    def month_start(df: pd.DataFrame) -> pd.Series:
        return df["date"].dt.to_period("M").dt.to_timestamp()

    out = aggregate_frame(records, month_start, [OVERALL_FIELD])
    return out.rename(columns={"key": "month"})


def airline_ratings(records: pd.DataFrame, min_reviews: int = MIN_AIRLINE_REVIEWS_DEFAULT) -> pd.DataFrame:
    out = aggregate_frame(records, "entity_name", rating_fields("airline"), min_count=min_reviews)
    if out.empty:
        return out
    return out.sort_values(["count", "entity_name"], ascending=[False, True]).reset_index(drop=True)


def airports_with_lounges(airports: pd.DataFrame, lounges: pd.DataFrame) -> List[Dict[str, Any]]:
    """Per airport, its own review stats plus the lounges located there."""
    airport_stats = aggregate_frame(airports, "entity_name", AIRPORT_DETAIL_FIELDS)
    lounge_stats = aggregate_frame(lounges, "airport", [OVERALL_FIELD])
    lounge_lookup = {row["airport"]: row for row in lounge_stats.to_dict(orient="records")}

    members: Dict[str, List[Dict[str, Any]]] = {}
    if not lounges.empty:
        for row in lounges.dropna(subset=["airport"]).to_dict(orient="records"):
            members.setdefault(row["airport"], []).append(
                {"name": row["entity_name"], **{k: optional_float(row.get(f)) for k, f in LOUNGE_MEMBER_FIELDS.items()}}
            )

    out: List[Dict[str, Any]] = []
    for row in airport_stats.to_dict(orient="records"):
        name = row["entity_name"]
        lounge_row = lounge_lookup.get(name)
        out.append(
            {
                "name": name,
                "airport": {
                    "count": int(row["count"]),
                    "avg_rating": optional_float(row[OVERALL_FIELD]),
                    "avg_queuing": optional_float(row["queuing_rating"]),
                    "avg_cleanliness": optional_float(row["terminal_cleanliness_rating"]),
                    "avg_shopping": optional_float(row["airport_shopping_rating"]),
                },
                "lounges": {
                    "count": int(lounge_row["count"]) if lounge_row is not None else 0,
                    "avg_rating": optional_float(lounge_row[OVERALL_FIELD]) if lounge_row is not None else None,
                    "lounges": members.get(name, []),
                },
            }
        )
    return out


def country_ratings(airports: pd.DataFrame, lounges: pd.DataFrame) -> pd.DataFrame:
    """Airport and lounge review stats per reviewer country, plus a count-weighted combined rating."""
    airport_stats = aggregate_frame(airports, "country", [OVERALL_FIELD]).rename(
        columns={"count": "airport_count", OVERALL_FIELD: "avg_airport_rating"}
    )
    lounge_stats = aggregate_frame(lounges, "country", [OVERALL_FIELD]).rename(
        columns={"count": "lounge_count", OVERALL_FIELD: "avg_lounge_rating"}
    )
    merged = airport_stats.merge(lounge_stats, on="country", how="outer")
    for col in ["airport_count", "lounge_count"]:
        merged[col] = pd.to_numeric(merged[col], errors="coerce").fillna(0).astype(int)
    for col in ["avg_airport_rating", "avg_lounge_rating"]:
        merged[col] = pd.to_numeric(merged[col], errors="coerce").astype(float)

    merged["total_reviews"] = merged["airport_count"] + merged["lounge_count"]
    weighted = (
        merged["avg_airport_rating"].fillna(0.0) * merged["airport_count"]
        + merged["avg_lounge_rating"].fillna(0.0) * merged["lounge_count"]
    )
    merged["combined_rating"] = np.where(merged["total_reviews"] > 0, weighted / merged["total_reviews"].replace(0, 1), np.nan)

    merged = merged[merged["total_reviews"] > 0]
    columns = [
        "country",
        "airport_count",
        "lounge_count",
        "avg_airport_rating",
        "avg_lounge_rating",
        "combined_rating",
        "total_reviews",
    ]
    return merged.sort_values("country")[columns].reset_index(drop=True)
