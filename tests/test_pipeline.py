from __future__ import annotations

import json

import pandas as pd
import pytest

import run_analysis
from happynet.config import AnalysisConfig
from happynet.pipeline import load_and_run, run_pipeline, summarize
from happynet.utils import load_json


def test_full_pipeline(internet_rows, happiness_rows):
    ctx = run_pipeline(internet_rows, happiness_rows)
    records = ctx.records

    assert ctx.n_records == 15
    assert ctx.merge.n_dropped == 4
    assert 0.8 < ctx.correlation <= 1.0
    assert ctx.regression.slope > 0
    assert 0.0 < ctx.r2 <= 1.0

    assert ctx.clusters.computed
    assert set(records["cluster_id"]) == {0, 1, 2}
    assert ctx.clusters.summary["count"].sum() == ctx.n_records

    assert "local_slope" in records.columns
    assert records["local_slope"].notna().any()

    assert ctx.residuals.top(10).shape[0] == 10
    assert ctx.interpretation.startswith("Pearson correlation = ")
    assert "very strong positive" in ctx.interpretation
    assert ctx.pattern.startswith("Countries above line (examples): ")


def test_two_record_example():
    internet = [
        {"Country": "A", "PctOfPopulationUsingInternet": 90, "Latitude": 0, "Longitude": 0},
        {"Country": "B", "PctOfPopulationUsingInternet": 10, "Latitude": 0, "Longitude": 1},
    ]
    happiness = [{"Country": "A", "Ladder score": 8}, {"Country": "B", "Ladder score": 4}]

    ctx = run_pipeline(internet, happiness)

    assert ctx.correlation == pytest.approx(1.0)
    assert ctx.regression.slope == pytest.approx(0.05)
    assert ctx.regression.intercept == pytest.approx(3.5)
    assert ctx.r2 == pytest.approx(1.0)
    assert not ctx.clusters.computed
    assert ctx.records["local_slope"].isna().all()


def test_single_record_does_not_crash():
    ctx = run_pipeline(
        [{"Country": "A", "PctOfPopulationUsingInternet": "90", "Latitude": "0", "Longitude": "0"}],
        [{"Country": "A", "Ladder score": "8"}],
    )

    assert ctx.n_records == 1
    assert ctx.correlation == 0.0
    assert ctx.r2 == 0.0
    assert not ctx.clusters.computed
    assert ctx.clusters.reason
    assert ctx.records["cluster_id"].isna().all()


def test_no_matches():
    ctx = run_pipeline(
        [{"Country": "A", "PctOfPopulationUsingInternet": "90", "Latitude": "0", "Longitude": "0"}],
        [{"Country": "Z", "Ladder score": "8"}],
    )

    assert ctx.n_records == 0
    assert ctx.residuals.top().empty
    assert json.dumps(summarize(ctx))


def test_each_run_gets_a_fresh_context(internet_rows, happiness_rows):
    first = run_pipeline(internet_rows, happiness_rows)
    second = run_pipeline(internet_rows[:5], happiness_rows)

    assert first.records is not second.records
    assert first.n_records == 15
    assert second.n_records == 5
    pd.testing.assert_frame_equal(
        first.records, run_pipeline(internet_rows, happiness_rows).records
    )


def test_config_is_threaded_through(internet_rows, happiness_rows):
    config = AnalysisConfig(n_rounds=1, bandwidth_km=100.0, top_n=3)
    ctx = run_pipeline(internet_rows, happiness_rows, config)

    assert ctx.clusters.n_rounds == 1
    assert ctx.records["local_slope"].isna().all()
    assert len(summarize(ctx)["top_residuals"]) == 3


def test_summary_is_json_serializable(internet_rows, happiness_rows):
    report = summarize(run_pipeline(internet_rows, happiness_rows))
    decoded = json.loads(json.dumps(report, allow_nan=False))

    assert decoded["n_countries"] == 15
    assert decoded["regression"]["equation"].startswith("y=")
    assert len(decoded["clusters"]["summary"]) == 3
    assert len(decoded["top_residuals"]) == 10
    assert decoded["local_slope"]["n_computed"] >= 1


def write_csvs(tmp_path, internet_rows, happiness_rows):
    internet_csv = tmp_path / "internet.csv"
    happiness_csv = tmp_path / "happiness.csv"
    pd.DataFrame(internet_rows).to_csv(internet_csv, index=False)
    pd.DataFrame(happiness_rows).to_csv(happiness_csv, index=False)
    return internet_csv, happiness_csv


def test_load_and_run(tmp_path, internet_rows, happiness_rows):
    internet_csv, happiness_csv = write_csvs(tmp_path, internet_rows, happiness_rows)
    ctx = load_and_run(internet_csv, happiness_csv)

    assert ctx.n_records == 15


def test_load_and_run_missing_file(tmp_path, internet_rows, happiness_rows):
    internet_csv, _ = write_csvs(tmp_path, internet_rows, happiness_rows)

    with pytest.raises(FileNotFoundError):
        load_and_run(internet_csv, tmp_path / "missing.csv")


def test_cli_writes_report(tmp_path, capsys, internet_rows, happiness_rows):
    internet_csv, happiness_csv = write_csvs(tmp_path, internet_rows, happiness_rows)
    output = tmp_path / "out" / "report.json"

    code = run_analysis.main(
        ["--internet", str(internet_csv), "--happiness", str(happiness_csv), "--output", str(output)]
    )

    assert code == 0
    assert load_json(output)["n_countries"] == 15
    out = capsys.readouterr().out
    assert "Merged countries: 15" in out
    assert "Pearson r:" in out


def test_cli_reports_load_failure(tmp_path):
    code = run_analysis.main(
        ["--internet", str(tmp_path / "a.csv"), "--happiness", str(tmp_path / "b.csv")]
    )

    assert code == 1


def test_cli_rejects_bad_bandwidth(tmp_path):
    assert run_analysis.main(["--bandwidth-km", "0"]) == 2
