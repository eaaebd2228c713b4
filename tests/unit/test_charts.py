import altair as alt
import pandas as pd

from review_core.charts import entity_color_scale, optimal_bin_count, rating_scale, to_vega_spec


def test_optimal_bin_count_follows_sturges():
    assert optimal_bin_count(0) == 1
    assert optimal_bin_count(1) == 1
    assert optimal_bin_count(8) == 4
    assert optimal_bin_count(1000) == 11


def test_to_vega_spec_returns_plain_dict():
    chart = alt.Chart(pd.DataFrame({"x": [1.0], "y": [2.0]})).mark_point().encode(x="x:Q", y=alt.Y("y:Q", scale=rating_scale()))

    spec = to_vega_spec(chart)

    assert isinstance(spec, dict)
    assert spec["mark"]["type"] == "point"
    assert spec["encoding"]["y"]["scale"]["domain"] == [0.0, 10.0]


def test_entity_colours_cover_every_entity_type():
    scale = entity_color_scale().to_dict()

    assert scale["domain"] == ["Airlines", "Airports", "Lounges"]
    assert len(scale["range"]) == 3
