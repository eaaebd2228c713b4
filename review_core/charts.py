from __future__ import annotations

import math
from typing import Any, Dict

import altair as alt

from review_core.config import ENTITY_COLORS, ENTITY_LABELS, ENTITY_TYPES, RATING_MAX, RATING_MIN

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def rating_scale(**kwargs: Any) -> alt.Scale:
    return alt.Scale(domain=[RATING_MIN, RATING_MAX], nice=True, **kwargs)


def performance_color_scale() -> alt.Scale:
    # red (poor) -> green (good) over the shared 0-10 domain
    return alt.Scale(domain=[RATING_MIN, RATING_MAX], scheme="redyellowgreen")


def entity_color_scale() -> alt.Scale:
    return alt.Scale(
        domain=[ENTITY_LABELS[e] for e in ENTITY_TYPES],
        range=[ENTITY_COLORS[e] for e in ENTITY_TYPES],
    )


def optimal_bin_count(n: int) -> int:
    """Sturges' rule."""
    if n <= 1:
        return 1
    return int(math.ceil(math.log2(n) + 1))
