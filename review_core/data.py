from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Tuple

import pandas as pd

from review_core.aggregate import filter_by_entities
from review_core.config import DATA_DIR, DATASET_FILES, ENTITY_TYPES
from review_core.dimensions import rating_column
from review_core.errors import DatasetLoadError
from review_core.filters import FilterState
from review_core.normalize import empty_records, normalize_reviews

logger = logging.getLogger(__name__)

Loader = Callable[[], pd.DataFrame]


def get_source_files(data_dir: Optional[Path] = None) -> Dict[str, Path]:
    base = Path(data_dir) if data_dir is not None else DATA_DIR
    return {entity_type: base / name for entity_type, name in DATASET_FILES.items()}


def file_signature(files: Mapping[str, Path]) -> Tuple[Tuple[str, str, Optional[float]], ...]:
    return tuple(
        (entity_type, str(path), path.stat().st_mtime if path.exists() else None)
        for entity_type, path in files.items()
    )


def read_review_csv(path: Path) -> pd.DataFrame:
    """Read a review file as untyped strings; blanks stay empty strings."""
    return pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8", on_bad_lines="skip")


def _load_one(entity_type: str, loader: Loader, path: Optional[Path]) -> pd.DataFrame:
    try:
        raw = loader()
        records = normalize_reviews(raw, entity_type)
    except Exception as exc:
        raise DatasetLoadError(entity_type, path, f"Failed to load {entity_type} reviews: {exc}") from exc
    logger.info("Loaded %s reviews: %d rows in, %d kept", entity_type, len(raw), len(records))
    return records


def ingest_datasets(
    loaders: Mapping[str, Loader],
    *,
    paths: Optional[Mapping[str, Path]] = None,
) -> Dict[str, object]:
    """Load every dataset concurrently and wait for all of them.

    A failing dataset is replaced by an empty frame and recorded; the others
    still load. ``error`` holds the first failure to complete.
    """
    paths = paths or {}
    datasets: Dict[str, pd.DataFrame] = {entity_type: empty_records(entity_type) for entity_type in ENTITY_TYPES}
    errors: Dict[str, DatasetLoadError] = {}
    first_error: Optional[str] = None
    loaded = 0

    with ThreadPoolExecutor(max_workers=max(1, len(loaders)), thread_name_prefix="review-load") as pool:
        futures = {
            pool.submit(_load_one, entity_type, loader, paths.get(entity_type)): entity_type
            for entity_type, loader in loaders.items()
        }
        for future in as_completed(futures):
            entity_type = futures[future]
            loaded += 1
            try:
                datasets[entity_type] = future.result()
            except DatasetLoadError as exc:
                logger.error("%s [%s]", exc, exc.error_code, exc_info=exc.__cause__)
                errors[entity_type] = exc
                if first_error is None:
                    first_error = str(exc)

    return {"datasets": datasets, "errors": errors, "error": first_error, "loaded": loaded}


@lru_cache(maxsize=4)
def _load_review_data_cached(files_sig: Tuple[Tuple[str, str, Optional[float]], ...]) -> Dict[str, object]:
    paths = {entity_type: Path(path) for entity_type, path, _ in files_sig}
    loaders = {entity_type: (lambda p=path: read_review_csv(p)) for entity_type, path in paths.items()}
    result = ingest_datasets(loaders, paths=paths)
    datasets: Dict[str, pd.DataFrame] = result["datasets"]  # type: ignore[assignment]

    return {
        "files": [path.name for path in paths.values()],
        "airline": datasets["airline"],
        "airport": datasets["airport"],
        "lounge": datasets["lounge"],
        "errors": result["errors"],
        "error": result["error"],
        "loaded": result["loaded"],
    }


def load_review_data(data_dir: Optional[Path] = None) -> Dict[str, object]:
    files = get_source_files(data_dir)
    return _load_review_data_cached(file_signature(files))


def prepare_context(state: FilterState, data_ctx: Dict[str, object]) -> Dict[str, object]:
    """Per-pass view of the data under the current filter state.

    The entity selection names airlines, so it only narrows airline records.
    """
    airline: pd.DataFrame = data_ctx.get("airline")  # type: ignore[assignment]
    airport: pd.DataFrame = data_ctx.get("airport")  # type: ignore[assignment]
    lounge: pd.DataFrame = data_ctx.get("lounge")  # type: ignore[assignment]
    airline = airline if airline is not None else empty_records("airline")
    airport = airport if airport is not None else empty_records("airport")
    lounge = lounge if lounge is not None else empty_records("lounge")

    return {
        "filters": state,
        "airline": airline,
        "airport": airport,
        "lounge": lounge,
        "airline_filtered": filter_by_entities(airline, state.selected_entities),
        "rating_columns": {entity_type: rating_column(state.active_dimension, entity_type) for entity_type in ENTITY_TYPES},
    }
