from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

from review_core.aggregate import aggregate_frame
from review_core.charts import performance_color_scale, rating_scale, to_vega_spec
from review_core.config import MIN_AIRLINE_REVIEWS_DEFAULT
from review_core.filters import FilterState
from review_core.normalize import OVERALL_FIELD

SCATTER_FIELDS = {
    "value_money": "value_money_rating",
    "seat_comfort": "seat_comfort_rating",
    "food_beverages": "food_beverages_rating",
    "cabin_staff": "cabin_staff_rating",
    "entertainment": "inflight_entertainment_rating",
    "recommendation_rate": "recommended_flag",
}


def compute_airline_scatter(
    state: FilterState,
    ctx: Dict[str, Any],
    *,
    min_reviews: int = MIN_AIRLINE_REVIEWS_DEFAULT,
) -> Dict[str, Any]:
    records: pd.DataFrame = ctx.get("airline_filtered", pd.DataFrame())

    # A dimension without an airline column falls back to the overall rating on this chart.
    spec = state.active_dimension.field_for("airline") if state.active_dimension is not None else None
    y_field = spec.field if spec is not None else OVERALL_FIELD
    y_label = state.active_dimension.label if spec is not None else "Overall"
    dimension_applicable = state.active_dimension is None or spec is not None

    payload: Dict[str, Any] = {
        "filters": state.to_dict(),
        "y_field": y_field,
        "y_label": y_label,
        "dimension_applicable": dimension_applicable,
        "airlines": [],
        "kpis": {"airline_count": 0, "review_count": 0},
        "charts": {},
    }
    if records.empty:
        return payload

    work = records.assign(recommended_flag=records["recommended"].fillna(False).astype(float))
    fields = list(dict.fromkeys([y_field, *SCATTER_FIELDS.values()]))
    stats = aggregate_frame(work, "entity_name", fields, min_count=min_reviews)

    out = pd.DataFrame(
        {
            "airline_name": stats["entity_name"],
            "review_count": stats["count"].astype(int),
            "y_value": stats[y_field],
            **{name: stats[col] for name, col in SCATTER_FIELDS.items()},
        }
    )
    out = out.dropna(subset=["value_money", "y_value"])
    out = out.sort_values(["review_count", "airline_name"], ascending=[False, True]).reset_index(drop=True)

    payload["airlines"] = out.to_dict(orient="records")
    payload["kpis"] = {"airline_count": int(len(out)), "review_count": int(out["review_count"].sum())}

    if not out.empty:
        scatter = (
            alt.Chart(out)
            .mark_circle(opacity=0.8, stroke="#2c3e50")
            .encode(
                x=alt.X("value_money:Q", title="Value for Money", scale=rating_scale()),
                y=alt.Y("y_value:Q", title=f"{y_label} Rating", scale=rating_scale()),
                size=alt.Size("review_count:Q", title="Reviews", scale=alt.Scale(range=[30, 900])),
                color=alt.Color("seat_comfort:Q", title="Seat Comfort", scale=performance_color_scale()),
                strokeWidth=alt.StrokeWidth("food_beverages:Q", title="Food & Beverages", scale=alt.Scale(domain=[0, 10], range=[0.5, 4])),
                tooltip=[
                    alt.Tooltip("airline_name:N", title="Airline"),
                    alt.Tooltip("review_count:Q", title="Reviews", format=","),
                    alt.Tooltip("y_value:Q", title=y_label, format=".1f"),
                    alt.Tooltip("value_money:Q", title="Value", format=".1f"),
                    alt.Tooltip("cabin_staff:Q", title="Cabin Staff", format=".1f"),
                    alt.Tooltip("entertainment:Q", title="Entertainment", format=".1f"),
                    alt.Tooltip("recommendation_rate:Q", title="Recommended", format=".0%"),
                ],
            )
            .properties(height=360)
        )
        payload["charts"] = {"airline_scatter": to_vega_spec(scatter)}

    return payload
