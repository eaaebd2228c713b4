from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

DATA_DIR = Path(__file__).resolve().parents[1] / "data"

ENTITY_TYPES: Tuple[str, ...] = ("airline", "airport", "lounge")

DATASET_FILES: Dict[str, str] = {
    "airline": "airline.csv",
    "airport": "airport.csv",
    "lounge": "lounge.csv",
}

ENTITY_LABELS: Dict[str, str] = {
    "airline": "Airlines",
    "airport": "Airports",
    "lounge": "Lounges",
}

ENTITY_COLORS: Dict[str, str] = {
    "airline": "#3498db",
    "airport": "#27ae60",
    "lounge": "#e67e22",
}

MONTH_NAMES: Tuple[str, ...] = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

BUCKET_MODES: Tuple[str, ...] = ("all", "individual", "5year")

RATING_MIN = 0.0
RATING_MAX = 10.0

MIN_AIRLINE_REVIEWS_DEFAULT = 10
TOP_ENTITIES_DEFAULT = 20


@dataclass(frozen=True)
class ViewSettings:
    min_airline_reviews: int = MIN_AIRLINE_REVIEWS_DEFAULT
    top_entities: int = TOP_ENTITIES_DEFAULT
    bucket_mode: str = "all"


def normalize_settings(raw: dict | None) -> ViewSettings:
    raw = raw or {}

    min_reviews = raw.get("min_airline_reviews", MIN_AIRLINE_REVIEWS_DEFAULT)
    try:
        min_reviews = int(min_reviews)
    except Exception:
        min_reviews = MIN_AIRLINE_REVIEWS_DEFAULT
    min_reviews = max(1, min(1000, min_reviews))

    top_n = raw.get("top_entities", TOP_ENTITIES_DEFAULT)
    try:
        top_n = int(top_n)
    except Exception:
        top_n = TOP_ENTITIES_DEFAULT
    top_n = max(1, min(200, top_n))

    bucket_mode = str(raw.get("bucket_mode") or "all").strip().lower()
    if bucket_mode not in BUCKET_MODES:
        bucket_mode = "all"

    return ViewSettings(min_airline_reviews=min_reviews, top_entities=top_n, bucket_mode=bucket_mode)
