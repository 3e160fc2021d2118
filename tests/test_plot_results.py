import os

import pandas as pd

import plot_results

COLUMNS = ["Type", "Name", "Request Count", "Failure Count",
           "Average Response Time", "95%", "Requests/s"]


def _stats_frame():
    return pd.DataFrame([
        ["POST", "POST /api/v1/patrons", 10, 1, 200.0, 400.0, 1.0],
        ["GET", "/cgi-bin/koha/circ/returns.pl", 30, 0, 100.0, 250.0, 3.0],
        ["CHECK", "checkout user matches", 10, 0, 0.0, 0.0, 1.0],
        ["CHECK", "results are not empty", 10, 2, 0.0, 0.0, 1.0],
        [None, "Aggregated", 60, 3, 91.7, 250.0, 6.0],
    ], columns=COLUMNS)


def test_summarize_level_separates_checks_from_requests():
    row = plot_results.summarize_level(_stats_frame(), 5)
    assert row["Users"] == 5
    assert row["Total"] == 40
    assert row["Failures"] == 1
    assert row["Avg (ms)"] == (10 * 200.0 + 30 * 100.0) / 40
    assert row["Worst p95 (ms)"] == 400.0
    assert row["Req/s"] == 4.0
    assert row["Error %"] == 2.5
    assert row["Checks"] == 20
    assert row["Check Pass %"] == 90.0


def test_check_summary_per_check():
    summary = plot_results.check_summary(_stats_frame())
    assert list(summary["Check"]) == ["checkout user matches", "results are not empty"]
    assert list(summary["Pass %"]) == [100.0, 80.0]


def test_step_latency_is_sorted_slowest_first():
    steps = plot_results.step_latency(_stats_frame())
    assert list(steps["Name"]) == ["POST /api/v1/patrons", "/cgi-bin/koha/circ/returns.pl"]


def test_collect_metrics_skips_missing_levels(tmp_path):
    _stats_frame().to_csv(tmp_path / "5_users_stats.csv", index=False)
    metrics = plot_results.collect_metrics(str(tmp_path), [1, 5])
    assert list(metrics["Users"]) == [5]


def test_main_writes_summary_and_charts(tmp_path, monkeypatch):
    raw = tmp_path / "results" / "api" / "raw"
    raw.mkdir(parents=True)
    _stats_frame().to_csv(raw / "1_users_stats.csv", index=False)
    _stats_frame().to_csv(raw / "5_users_stats.csv", index=False)
    monkeypatch.chdir(tmp_path)

    assert plot_results.main(["api", "1", "5"]) == 0

    graphs = tmp_path / "results" / "api" / "graphs"
    for name in ["summary.csv", "response_time_vs_load.png", "throughput_vs_load.png",
                 "check_pass_rate.png", "per_step_latency.png"]:
        assert os.path.exists(graphs / name), name


def test_main_without_data_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert plot_results.main(["circulation"]) == 1
