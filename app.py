import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

import pandas as pd
import streamlit as st

from review_core.config import BUCKET_MODES, ENTITY_LABELS, ENTITY_TYPES, MIN_AIRLINE_REVIEWS_DEFAULT, TOP_ENTITIES_DEFAULT, normalize_settings
from review_core.data import load_review_data
from review_core.dimensions import DIMENSIONS
from review_core.filters import FilterBroker
from review_core.session import ExplorerSession

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

BUCKET_LABELS = {"all": "All years", "individual": "Individual years", "5year": "5-year periods"}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #2c3e50;}
        .card-actions {font-size: 0.85rem;color: #7f8c8d;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(state_dict: Dict[str, Any], mode: str) -> str:
    dim_chip = f"Dimension: {state_dict['active_dimension_label'] or 'Overall'}"
    selected = state_dict["selected_entities"]
    airline_chip = "Airlines: All" if not selected else f"Airlines: {len(selected)} selected"
    mode_chip = f"Years: {BUCKET_LABELS[mode]}"
    return "".join([f"<span class='chip'>{txt}</span>" for txt in [dim_chip, airline_chip, mode_chip]])


def get_session(data_ctx: Dict[str, Any], settings) -> ExplorerSession:
    # One broker per browser session; it outlives reruns and dataset reloads.
    broker = st.session_state.setdefault("filter_broker", FilterBroker())
    session: Optional[ExplorerSession] = st.session_state.get("explorer_session")
    if session is None or session.data_ctx is not data_ctx or session.settings != settings:
        if session is not None:
            session.close()
        session = ExplorerSession(data_ctx, broker=broker, settings=settings)
        st.session_state["explorer_session"] = session
    return session


def render_chart(payload: Dict[str, Any], name: str, empty_message: str):
    spec = payload.get("charts", {}).get(name)
    if spec is None:
        st.info(empty_message)
        return
    st.vega_lite_chart(spec, use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="SkyTrax Review Explorer", layout="wide")
inject_base_styles()
st.title("SkyTrax Review Explorer")

data_ctx = load_review_data()
if data_ctx.get("error"):
    st.error(f"Error: {data_ctx['error']}")

airline_df: pd.DataFrame = data_ctx["airline"]
if airline_df.empty:
    st.warning("No airline data loaded. Place airline.csv, airport.csv and lounge.csv in the data/ folder.")
    st.stop()

st.caption(
    "Interactive analysis of "
    + ", ".join(f"{len(data_ctx[e]):,} {e}" for e in ENTITY_TYPES)
    + " reviews."
)

# ----- Sidebar: dimension, years, airlines -----
with st.sidebar:
    with st.expander("Advanced settings", expanded=False):
        min_reviews = st.slider("Minimum reviews per airline", 1, 100, MIN_AIRLINE_REVIEWS_DEFAULT, 1)
        top_entities = st.slider("Airlines listed", 5, 50, TOP_ENTITIES_DEFAULT, 5)

    st.markdown("### Time grouping")
    bucket_mode = st.radio("Group years", options=list(BUCKET_MODES), format_func=lambda m: BUCKET_LABELS[m], index=0)

settings = normalize_settings({"min_airline_reviews": min_reviews, "top_entities": top_entities, "bucket_mode": bucket_mode})
session = get_session(data_ctx, settings)
broker = session.broker

with st.sidebar:
    st.markdown("---")
    st.markdown("### Rating dimension")
    dim_cols = st.columns(len(DIMENSIONS))
    for col, dim in zip(dim_cols, DIMENSIONS):
        col.button(
            dim.label,
            key=f"dim_{dim.key}",
            type="primary" if broker.state.dimension_key == dim.key else "secondary",
            on_click=broker.set_active_dimension,
            args=(dim,),
        )

    st.markdown("---")
    st.markdown("### Airlines")
    choices = session.airline_choices()
    counts = dict(choices)
    names = [name for name, _ in choices]

    def _select_all():
        st.session_state["airline_selection"] = names

    def _clear_all():
        st.session_state["airline_selection"] = []

    def _reset_all():
        st.session_state["airline_selection"] = []
        broker.reset()

    btn_cols = st.columns(2)
    btn_cols[0].button("Select All", on_click=_select_all)
    btn_cols[1].button("Clear", on_click=_clear_all)
    current = st.session_state.get("airline_selection", sorted(broker.state.selected_entities))
    st.session_state["airline_selection"] = [n for n in current if n in counts]
    selection = st.multiselect(
        "Airlines",
        options=names,
        format_func=lambda n: f"{n} ({counts.get(n, 0)})",
        key="airline_selection",
    )
    broker.set_selected_entities(selection)
    st.button("Reset All Filters", on_click=_reset_all)

state = broker.state
st.markdown(f"<div class='chip-row'>{format_filter_summary(state.to_dict(), settings.bucket_mode)}</div>", unsafe_allow_html=True)

# ----- Charts -----
left, right = st.columns(2)
with left:
    scatter = session.airline_scatter()
    title = f"Airline Performance: {scatter['y_label']}"
    note = None if scatter["dimension_applicable"] else "No airline data for this dimension; showing Overall"
    with card(title, note):
        render_chart(scatter, "airline_scatter", "No airline has enough reviews for the current filters.")

with right:
    series = session.time_series(settings.bucket_mode)
    missing = [ENTITY_LABELS[e] for e, ok in series["has_data"].items() if not ok]
    with card(f"Monthly {series['y_label']} Ratings", f"No data: {', '.join(missing)}" if missing else None):
        render_chart(series, "time_series", "No dated ratings for the current dimension.")

matrix = session.dimension_matrix()
with card("Performance by Dimension", "Pick a dimension in the sidebar to re-point every chart"):
    render_chart(matrix, "dimension_matrix", "No ratings available.")
    rows = []
    for dim in matrix["dimensions"]:
        row = {"Dimension": dim["label"] + (" *" if dim["active"] else "")}
        for cell in dim["entity_averages"]:
            row[cell["label"]] = f"{cell['average']:.2f} ({cell['count']:,})" if cell["has_data"] else "no data"
        rows.append(row)
    st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)
    render_chart(matrix, "distribution", "No ratings to plot.")

countries = session.country_table()
with card("Airport & Lounge Ratings by Reviewer Country", "Combined rating is weighted by review count"):
    if countries.empty:
        st.info("No airport or lounge reviews with a reviewer country.")
    else:
        table = countries.sort_values(["total_reviews", "country"], ascending=[False, True]).rename(
            columns={
                "country": "Country",
                "airport_count": "Airport Reviews",
                "lounge_count": "Lounge Reviews",
                "avg_airport_rating": "Avg Airport",
                "avg_lounge_rating": "Avg Lounge",
                "combined_rating": "Combined",
                "total_reviews": "Total Reviews",
            }
        )
        st.dataframe(table.round(2), hide_index=True, use_container_width=True)
