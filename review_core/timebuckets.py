from __future__ import annotations

from typing import List, Optional

import pandas as pd

from review_core.aggregate import aggregate_frame, rollup_frame
from review_core.config import BUCKET_MODES, RATING_MAX, RATING_MIN
from review_core.errors import UnknownBucketModeError

MONTHLY_COLUMNS: List[str] = ["entity_type", "year", "month", "avg_rating", "count"]
BUCKETED_COLUMNS: List[str] = ["entity_type", "month", "year", "period_start", "year_label", "avg_rating", "count"]

ALL_YEARS_LABEL = "All Years"
PERIOD_YEARS = 5


def check_bucket_mode(mode: str) -> str:
    if mode not in BUCKET_MODES:
        raise UnknownBucketModeError(f"Unknown time bucket mode {mode!r}; expected one of {', '.join(BUCKET_MODES)}")
    return mode


def period_start(year: int) -> int:
    return (int(year) // PERIOD_YEARS) * PERIOD_YEARS


def period_label(start: int) -> str:
    return f"{int(start)}-{int(start) + PERIOD_YEARS - 1}"


def monthly_aggregates(records: pd.DataFrame, rating_column: Optional[str]) -> pd.DataFrame:
    """Mean rating and rating count per (entity type, year, month).

    Only dated records with a present rating contribute, so ``count`` is the
    number of ratings behind each mean. ``rating_column=None`` (the entity
    has no such rating) yields an empty frame.
    """
    if (
        rating_column is None
        or records is None
        or records.empty
        or rating_column not in records.columns
        or "date" not in records.columns
    ):
        return pd.DataFrame(columns=MONTHLY_COLUMNS)

    dated = records[records["date"].notna() & records[rating_column].notna()]
    if dated.empty:
        return pd.DataFrame(columns=MONTHLY_COLUMNS)
    dated = dated.assign(year=dated["date"].dt.year.astype(int), month=dated["date"].dt.month.astype(int))

    out = aggregate_frame(dated, ["entity_type", "year", "month"], [rating_column], drop_null=True)
    out = out.rename(columns={rating_column: "avg_rating"})
    out["avg_rating"] = out["avg_rating"].clip(RATING_MIN, RATING_MAX)
    return out[MONTHLY_COLUMNS]


def bucket_monthly(monthly: pd.DataFrame, mode: str) -> pd.DataFrame:
    """Regroup monthly aggregates by time bucket mode.

    - ``all``: one point per (entity type, month) across every year
    - ``individual``: monthly aggregates unchanged, labelled with their year
    - ``5year``: one point per (entity type, month, 5-year period)

    Pooled modes average the monthly means without weighting them by their
    counts; counts are summed.
    """
    check_bucket_mode(mode)
    if monthly is None or monthly.empty:
        return pd.DataFrame(columns=BUCKETED_COLUMNS)

    if mode == "all":
        out = rollup_frame(monthly, ["entity_type", "month"], mean_fields=["avg_rating"], sum_fields=["count"])
        out["year"] = pd.NA
        out["period_start"] = pd.NA
        out["year_label"] = ALL_YEARS_LABEL
    elif mode == "individual":
        out = monthly.copy()
        out["year"] = out["year"].astype(int)
        out["period_start"] = out["year"]
        out["year_label"] = out["year"].astype(str)
    else:
        work = monthly.assign(period_start=monthly["year"].astype(int).map(period_start))
        out = rollup_frame(
            work, ["entity_type", "month", "period_start"], mean_fields=["avg_rating"], sum_fields=["count"]
        )
        out["year"] = pd.NA
        out["year_label"] = out["period_start"].map(period_label)

    out["year"] = out["year"].astype("Int64")
    out["period_start"] = out["period_start"].astype("Int64")
    out["month"] = out["month"].astype(int)
    out["count"] = out["count"].astype(int)
    out["avg_rating"] = out["avg_rating"].astype(float)
    out = out.sort_values(["entity_type", "month", "period_start"], na_position="first")
    return out[BUCKETED_COLUMNS].reset_index(drop=True)


def overall_by_month(bucketed: pd.DataFrame) -> pd.DataFrame:
    """Mean of the bucketed averages per month, across entity types and periods."""
    return rollup_frame(bucketed, ["month"], mean_fields=["avg_rating"])
