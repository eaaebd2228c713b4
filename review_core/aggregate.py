from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

KeySpec = Union[str, Sequence[str], Callable[[pd.DataFrame], Any]]

CALLABLE_KEY_COLUMN = "key"


@dataclass(frozen=True)
class Aggregate:
    key: Hashable
    count: int
    mean: Dict[str, Optional[float]] = field(default_factory=dict)

    def __hash__(self) -> int:
        return hash((self.key, self.count, tuple(sorted(self.mean.items()))))

    def has_data(self, field_name: str) -> bool:
        return self.mean.get(field_name) is not None


def optional_float(value: object) -> Optional[float]:
    """Return a plain float, or None for missing / NaN / infinite values."""
    if value is None or value is pd.NA:
        return None
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def mean_or_none(values: pd.Series) -> Optional[float]:
    numeric = pd.to_numeric(values, errors="coerce").dropna()
    if numeric.empty:
        return None
    return optional_float(numeric.mean())


def _key_names(key: KeySpec) -> List[str]:
    if callable(key):
        return [CALLABLE_KEY_COLUMN]
    if isinstance(key, str):
        return [key]
    return list(key)


def _with_keys(records: pd.DataFrame, key: KeySpec) -> Tuple[pd.DataFrame, List[str]]:
    if not callable(key):
        return records, _key_names(key)
    values = key(records)
    if not isinstance(values, pd.Series):
        values = pd.Series(list(values), index=records.index)
    return records.assign(**{CALLABLE_KEY_COLUMN: values}), [CALLABLE_KEY_COLUMN]


def aggregate_frame(
    records: pd.DataFrame,
    key: KeySpec,
    fields: Iterable[str] = (),
    *,
    min_count: int = 1,
    drop_null: bool = False,
) -> pd.DataFrame:
    """Group records by ``key`` and reduce each group to a count plus field means.

    Means skip missing values; a group without any present value for a field
    gets NaN for it. Fields the records do not carry are treated as all-missing.
    Rows whose key is null are not grouped.
    """
    fields = list(fields)
    min_count = max(1, int(min_count))
    names = _key_names(key)
    if records is None or records.empty:
        return pd.DataFrame(columns=names + ["count"] + fields)

    work, keys = _with_keys(records, key)
    missing = [f for f in fields if f not in work.columns]
    if missing:
        work = work.assign(**{f: np.nan for f in missing})

    grouped = work.groupby(keys, dropna=True, sort=True)
    out = grouped.size().rename("count").to_frame()
    if fields:
        out = out.join(grouped[fields].mean())
    out = out.reset_index()

    if min_count > 1:
        out = out[out["count"] >= min_count]
    if drop_null and fields:
        out = out.dropna(subset=fields, how="all")
    return out.reset_index(drop=True)


def aggregate(
    records: pd.DataFrame,
    key: KeySpec,
    fields: Iterable[str] = (),
    *,
    min_count: int = 1,
    drop_null: bool = False,
) -> List[Aggregate]:
    fields = list(fields)
    names = _key_names(key)
    frame = aggregate_frame(records, key, fields, min_count=min_count, drop_null=drop_null)

    out: List[Aggregate] = []
    for row in frame.to_dict(orient="records"):
        key_values = tuple(row[n] for n in names)
        out.append(
            Aggregate(
                key=key_values[0] if len(names) == 1 else key_values,
                count=int(row["count"]),
                mean={f: optional_float(row[f]) for f in fields},
            )
        )
    return out


def rollup_frame(
    aggregates: pd.DataFrame,
    keys: Sequence[str],
    *,
    mean_fields: Sequence[str] = (),
    sum_fields: Sequence[str] = (),
) -> pd.DataFrame:
    """Aggregate already-aggregated rows: unweighted mean of means, sum of counts."""
    keys = list(keys)
    if aggregates is None or aggregates.empty:
        return pd.DataFrame(columns=keys + list(mean_fields) + list(sum_fields))
    spec: Dict[str, str] = {f: "mean" for f in mean_fields}
    spec.update({f: "sum" for f in sum_fields})
    return aggregates.groupby(keys, dropna=True, sort=True).agg(spec).reset_index()


def filter_by_entities(records: pd.DataFrame, selected: Optional[Iterable[str]]) -> pd.DataFrame:
    """Restrict records to the selected entity names. An empty selection keeps everything."""
    selected = frozenset(selected or ())
    if not selected or records.empty or "entity_name" not in records.columns:
        return records
    return records[records["entity_name"].isin(selected)]
