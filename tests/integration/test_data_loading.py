from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from review_core.data import get_source_files, ingest_datasets, load_review_data, read_review_csv
from review_core.errors import DatasetLoadError

AIRLINE_CSV = """airline_name,link,title,author,author_country,date,content,overall_rating,seat_comfort_rating,cabin_staff_rating,value_money_rating,recommended
ExampleAir,/x,r1,A,United Kingdom,2015-04-10,"Good, on time",8,4,5,4,1
ExampleAir,/x,r2,B,France,2015-05-02,Fine,6,5,3,3,1
ExampleAir,/x,r3,C,France,2016-04-21,Meh,0,,,2,0
OtherJet,/x,r4,D,Spain,2012-04-03,Bad,4,2,,2,0
"""

AIRPORT_CSV = """airport_name,author_country,date,overall_rating,terminal_cleanliness_rating,airport_staff_rating
Heathrow,France,2015-04-12,6,4,3
Heathrow,Germany,2015-05-01,8,5,
"""

LOUNGE_CSV = """lounge_name,airport,author_country,date,overall_rating,comfort_rating,cleanliness_rating
Galleries Club,Heathrow,France,2015-04-20,4,4,5
"""


def _write(base: Path, name: str, text: str) -> None:
    (base / name).write_text(text, encoding="utf-8")


@pytest.mark.integration
def test_load_review_data_reads_all_three_files(tmp_path: Path):
    _write(tmp_path, "airline.csv", AIRLINE_CSV)
    _write(tmp_path, "airport.csv", AIRPORT_CSV)
    _write(tmp_path, "lounge.csv", LOUNGE_CSV)

    ctx = load_review_data(tmp_path)

    assert ctx["error"] is None
    assert ctx["loaded"] == 3
    assert ctx["files"] == ["airline.csv", "airport.csv", "lounge.csv"]
    assert ctx["airline"]["entity_name"].tolist() == ["ExampleAir", "ExampleAir", "OtherJet"]
    assert ctx["airline"]["seat_comfort_rating"].tolist()[:2] == [8.0, 10.0]
    assert len(ctx["airport"]) == 2
    assert ctx["lounge"]["overall_rating"].tolist() == [8.0]


@pytest.mark.integration
def test_missing_file_is_recorded_and_the_rest_still_load(tmp_path: Path, caplog):
    _write(tmp_path, "airline.csv", AIRLINE_CSV)
    _write(tmp_path, "lounge.csv", LOUNGE_CSV)

    ctx = load_review_data(tmp_path)

    assert ctx["loaded"] == 3
    assert set(ctx["errors"]) == {"airport"}
    assert isinstance(ctx["errors"]["airport"], DatasetLoadError)
    assert "airport" in ctx["error"]
    assert ctx["airport"].empty
    assert "overall_rating" in ctx["airport"].columns
    assert len(ctx["airline"]) == 3
    assert len(ctx["lounge"]) == 1
    assert "DATASET_LOAD_ERROR" in caplog.text


@pytest.mark.integration
def test_results_are_cached_by_file_signature(tmp_path: Path):
    _write(tmp_path, "airline.csv", AIRLINE_CSV)
    _write(tmp_path, "airport.csv", AIRPORT_CSV)
    _write(tmp_path, "lounge.csv", LOUNGE_CSV)

    assert load_review_data(tmp_path) is load_review_data(tmp_path)


@pytest.mark.integration
def test_read_review_csv_keeps_blanks_as_strings(tmp_path: Path):
    _write(tmp_path, "airport.csv", AIRPORT_CSV)

    raw = read_review_csv(tmp_path / "airport.csv")

    assert raw["airport_staff_rating"].tolist() == ["3", ""]


def test_ingest_waits_for_every_loader():
    def failing():
        raise OSError("disk gone")

    result = ingest_datasets(
        {
            "airline": lambda: pd.DataFrame({"airline_name": ["A"], "overall_rating": ["5"]}),
            "airport": failing,
            "lounge": failing,
        }
    )

    assert result["loaded"] == 3
    assert sorted(result["errors"]) == ["airport", "lounge"]
    assert result["error"] in {str(result["errors"]["airport"]), str(result["errors"]["lounge"])}
    assert result["datasets"]["airline"]["entity_name"].tolist() == ["A"]
    assert isinstance(result["errors"]["airport"].__cause__, OSError)


def test_source_files_default_to_repository_data_dir():
    files = get_source_files()

    assert [p.name for p in files.values()] == ["airline.csv", "airport.csv", "lounge.csv"]
    assert files["airline"].parent.name == "data"
