from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

from review_core.charts import entity_color_scale, rating_scale, to_vega_spec
from review_core.config import ENTITY_LABELS, ENTITY_TYPES, MONTH_NAMES
from review_core.filters import FilterState
from review_core.timebuckets import bucket_monthly, check_bucket_mode, monthly_aggregates, overall_by_month


def _with_month_names(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df.assign(month_name=pd.Series(dtype=str))
    return df.assign(month_name=df["month"].astype(int).map(lambda m: MONTH_NAMES[m - 1]))


def compute_time_series(state: FilterState, ctx: Dict[str, Any], *, mode: str = "all") -> Dict[str, Any]:
    check_bucket_mode(mode)
    rating_columns: Dict[str, Any] = ctx.get("rating_columns", {})

    monthly_frames: List[pd.DataFrame] = []
    has_data: Dict[str, bool] = {}
    for entity_type in ENTITY_TYPES:
        records: pd.DataFrame = ctx.get(entity_type, pd.DataFrame())
        monthly = monthly_aggregates(records, rating_columns.get(entity_type))
        has_data[entity_type] = not monthly.empty
        if not monthly.empty:
            monthly_frames.append(monthly)

    monthly_all = pd.concat(monthly_frames, ignore_index=True) if monthly_frames else pd.DataFrame()
    series = bucket_monthly(monthly_all, mode)
    overall = overall_by_month(series)

    series = _with_month_names(series)
    if not series.empty:
        series = series.assign(category=series["entity_type"].map(ENTITY_LABELS))
    overall = _with_month_names(overall)

    y_label = state.active_dimension.label if state.active_dimension is not None else "Overall"
    charts: Dict[str, Any] = {}
    if not series.empty:
        chart_data = series[["month_name", "category", "year_label", "avg_rating", "count"]]
        points = (
            alt.Chart(chart_data)
            .mark_point(filled=True, opacity=0.75)
            .encode(
                x=alt.X("month_name:O", title="Month", sort=list(MONTH_NAMES)),
                y=alt.Y("avg_rating:Q", title=f"{y_label} Rating", scale=rating_scale()),
                size=alt.Size("count:Q", title="Reviews", scale=alt.Scale(range=[20, 300])),
                color=alt.Color("category:N", title="Category", scale=entity_color_scale()),
                shape=alt.Shape("category:N", title="Category"),
                tooltip=[
                    alt.Tooltip("category:N", title="Category"),
                    alt.Tooltip("month_name:O", title="Month"),
                    alt.Tooltip("year_label:N", title="Years"),
                    alt.Tooltip("avg_rating:Q", title="Avg Rating", format=".2f"),
                    alt.Tooltip("count:Q", title="Reviews", format=","),
                ],
            )
        )
        layers = [points]
        if mode == "all":
            trend = (
                alt.Chart(chart_data)
                .mark_line(interpolate="monotone", strokeWidth=2)
                .encode(
                    x=alt.X("month_name:O", sort=list(MONTH_NAMES)),
                    y=alt.Y("avg_rating:Q"),
                    color=alt.Color("category:N", scale=entity_color_scale(), legend=None),
                )
            )
            layers.append(trend)
        overall_line = (
            alt.Chart(overall)
            .mark_line(strokeDash=[5, 5], color="#2c3e50")
            .encode(x=alt.X("month_name:O", sort=list(MONTH_NAMES)), y=alt.Y("avg_rating:Q"))
        )
        layers.append(overall_line)
        charts["time_series"] = to_vega_spec(alt.layer(*layers).properties(height=320))

    return {
        "filters": state.to_dict(),
        "mode": mode,
        "y_label": y_label,
        "has_data": has_data,
        "series": series.to_dict(orient="records"),
        "overall_by_month": overall.to_dict(orient="records"),
        "charts": charts,
    }
