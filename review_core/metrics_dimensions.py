from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

from review_core.aggregate import mean_or_none
from review_core.charts import entity_color_scale, optimal_bin_count, rating_scale, to_vega_spec
from review_core.config import ENTITY_COLORS, ENTITY_LABELS, ENTITY_TYPES
from review_core.dimensions import DIMENSIONS, get_dimension
from review_core.filters import FilterState


def _present_values(records: pd.DataFrame, field: str) -> pd.Series:
    if records is None or records.empty or field not in records.columns:
        return pd.Series(dtype=float)
    return records[field].dropna()


def compute_dimension_matrix(state: FilterState, ctx: Dict[str, Any]) -> Dict[str, Any]:
    dimensions: List[Dict[str, Any]] = []
    bar_rows: List[Dict[str, Any]] = []
    for dim in DIMENSIONS:
        entity_averages: List[Dict[str, Any]] = []
        for entity_type in ENTITY_TYPES:
            spec = dim.field_for(entity_type)
            values = _present_values(ctx.get(entity_type), spec.field) if spec is not None else pd.Series(dtype=float)
            average = mean_or_none(values)
            entity_averages.append(
                {
                    "entity_type": entity_type,
                    "label": ENTITY_LABELS[entity_type],
                    "field": spec.field if spec is not None else None,
                    "applicable": spec is not None,
                    "average": average,
                    "count": int(len(values)),
                    "has_data": average is not None,
                    "color": ENTITY_COLORS[entity_type],
                }
            )
            if average is not None:
                bar_rows.append(
                    {
                        "dimension": dim.label,
                        "category": ENTITY_LABELS[entity_type],
                        "average": average,
                        "count": int(len(values)),
                        "emphasis": 1.0 if state.active_dimension is None or state.dimension_key == dim.key else 0.35,
                    }
                )
        dimensions.append(
            {
                "key": dim.key,
                "label": dim.label,
                "active": state.dimension_key == dim.key,
                "has_data": any(e["has_data"] for e in entity_averages),
                "entity_averages": entity_averages,
            }
        )

    charts: Dict[str, Any] = {}
    if bar_rows:
        bars = (
            alt.Chart(pd.DataFrame(bar_rows))
            .mark_bar()
            .encode(
                x=alt.X("dimension:N", title=None, sort=[d.label for d in DIMENSIONS]),
                xOffset=alt.XOffset("category:N", sort=[ENTITY_LABELS[e] for e in ENTITY_TYPES]),
                y=alt.Y("average:Q", title="Average Rating (0-10)", scale=rating_scale()),
                color=alt.Color("category:N", title="Category", scale=entity_color_scale()),
                opacity=alt.Opacity("emphasis:Q", scale=None, legend=None),
                tooltip=[
                    alt.Tooltip("dimension:N", title="Dimension"),
                    alt.Tooltip("category:N", title="Category"),
                    alt.Tooltip("average:Q", title="Average", format=".2f"),
                    alt.Tooltip("count:Q", title="Ratings", format=","),
                ],
            )
            .properties(height=260)
        )
        charts["dimension_matrix"] = to_vega_spec(bars)

    focus = state.active_dimension or get_dimension("overall")
    dist_frames = []
    for entity_type in ENTITY_TYPES:
        spec = focus.field_for(entity_type)
        if spec is None:
            continue
        values = _present_values(ctx.get(entity_type), spec.field)
        if not values.empty:
            dist_frames.append(pd.DataFrame({"category": ENTITY_LABELS[entity_type], "rating": values.to_numpy()}))
    if dist_frames:
        dist = pd.concat(dist_frames, ignore_index=True)
        histogram = (
            alt.Chart(dist)
            .mark_bar(opacity=0.6)
            .encode(
                x=alt.X("rating:Q", title=f"{focus.label} Rating", bin=alt.Bin(maxbins=optimal_bin_count(len(dist)), extent=[0, 10])),
                y=alt.Y("count():Q", title="Ratings", stack=None),
                color=alt.Color("category:N", title="Category", scale=entity_color_scale()),
            )
            .properties(height=200)
        )
        charts["distribution"] = to_vega_spec(histogram)

    return {"filters": state.to_dict(), "dimensions": dimensions, "charts": charts}
