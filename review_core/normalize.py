from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from review_core.config import ENTITY_TYPES, RATING_MAX
from review_core.errors import UnknownEntityTypeError

RawRows = Union[pd.DataFrame, Iterable[Mapping[str, object]]]

NAME_FIELDS: Dict[str, str] = {
    "airline": "airline_name",
    "airport": "airport_name",
    "lounge": "lounge_name",
}

OVERALL_FIELD = "overall_rating"

# Native maximum of every recognised rating column. Canonical value = raw * (10 / native max).
RATING_SCALES: Dict[str, Dict[str, int]] = {
    "airline": {
        "overall_rating": 10,
        "seat_comfort_rating": 5,
        "cabin_staff_rating": 5,
        "food_beverages_rating": 5,
        "inflight_entertainment_rating": 5,
        "ground_service_rating": 5,
        "wifi_connectivity_rating": 5,
        "value_money_rating": 5,
    },
    "airport": {
        "overall_rating": 10,
        "queuing_rating": 5,
        "terminal_cleanliness_rating": 5,
        "terminal_seating_rating": 5,
        "terminal_signs_rating": 5,
        "food_beverages_rating": 5,
        "airport_shopping_rating": 5,
        "wifi_connectivity_rating": 5,
        "airport_staff_rating": 5,
    },
    "lounge": {
        "overall_rating": 5,
        "comfort_rating": 5,
        "cleanliness_rating": 5,
        "bar_beverages_rating": 5,
        "catering_rating": 5,
        "washrooms_rating": 5,
        "wifi_connectivity_rating": 5,
        "staff_service_rating": 5,
    },
}

BASE_COLUMNS: List[str] = ["entity_type", "entity_name", "airport", "country", "date", "recommended"]

NA_TOKENS = {"", "nan", "none", "null", "<na>", "na", "n/a"}

DATE_FORMAT = "%Y-%m-%d"


def check_entity_type(entity_type: str) -> str:
    if entity_type not in ENTITY_TYPES:
        raise UnknownEntityTypeError(f"Unknown entity type {entity_type!r}; expected one of {', '.join(ENTITY_TYPES)}")
    return entity_type


def rating_fields(entity_type: str) -> List[str]:
    return list(RATING_SCALES[check_entity_type(entity_type)])


def rating_multiplier(entity_type: str, field: str) -> Optional[float]:
    native_max = RATING_SCALES[check_entity_type(entity_type)].get(field)
    if native_max is None:
        return None
    return RATING_MAX / native_max


def canonical_columns(entity_type: str) -> List[str]:
    return BASE_COLUMNS + rating_fields(entity_type)


def _as_frame(raw_rows: RawRows) -> pd.DataFrame:
    if isinstance(raw_rows, pd.DataFrame):
        return raw_rows
    return pd.DataFrame.from_records(list(raw_rows))


def _text_column(df: pd.DataFrame, col: str) -> pd.Series:
    if col not in df.columns:
        return pd.Series(pd.NA, index=df.index, dtype="string")
    series = df[col].astype("string").str.strip()
    return series.mask(series.str.lower().isin(NA_TOKENS))


def _numeric_column(df: pd.DataFrame, col: str) -> pd.Series:
    if col not in df.columns:
        return pd.Series(float("nan"), index=df.index, dtype=float)
    cleaned = df[col].map(lambda v: v.strip() if isinstance(v, str) else v)
    return pd.to_numeric(cleaned, errors="coerce").astype(float)


def scale_rating(values: pd.Series, native_max: int) -> pd.Series:
    """Rescale raw ratings to 0-10.

    Zero, negative and out-of-range values become NaN: a falsy rating means
    "not rated", never a score of zero.
    """
    values = values.where((values > 0) & (values <= native_max))
    return values * (RATING_MAX / native_max)


def _recommended_column(df: pd.DataFrame) -> pd.Series:
    flag = _text_column(df, "recommended")
    return flag.map({"1": True, "0": False}).astype("boolean")


def normalize_reviews(raw_rows: RawRows, entity_type: str) -> pd.DataFrame:
    """Turn raw review rows of one source into canonical records.

    Rows without an entity name or without a usable overall rating are
    dropped. The input is never modified.
    """
    check_entity_type(entity_type)
    df = _as_frame(raw_rows)

    out = pd.DataFrame(
        {
            "entity_type": pd.Series(entity_type, index=df.index, dtype=object),
            "entity_name": _text_column(df, NAME_FIELDS[entity_type]),
            "airport": (_text_column(df, "airport") if entity_type == "lounge" else pd.Series(pd.NA, index=df.index, dtype="string")),
            "country": _text_column(df, "author_country"),
            "date": pd.to_datetime(_text_column(df, "date"), format=DATE_FORMAT, errors="coerce"),
            "recommended": (_recommended_column(df) if entity_type == "airline" else pd.Series(pd.NA, index=df.index, dtype="boolean")),
        },
        index=df.index,
    )
    for field, native_max in RATING_SCALES[entity_type].items():
        out[field] = scale_rating(_numeric_column(df, field), native_max)

    keep = out["entity_name"].notna() & out[OVERALL_FIELD].notna()
    return out[keep].reset_index(drop=True)


def empty_records(entity_type: str) -> pd.DataFrame:
    return normalize_reviews(pd.DataFrame(), entity_type)
