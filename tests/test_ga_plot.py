import json

import pytest

from ga_plot import load_rows, plot_rows, rolling_avg


def test_load_rows_skips_blank_lines(tmp_path):
    path = tmp_path / "ga_log.jsonl"
    rows = [{"generation": 1, "best": 2.0, "average": 1.0, "worst": 0.0}]
    path.write_text(json.dumps(rows[0]) + "\n\n")
    assert load_rows(path) == rows


def test_load_rows_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rows(tmp_path / "missing.jsonl")


def test_rolling_avg():
    assert rolling_avg([1, 2, 3, 4], 2) == [1, 1.5, 2.5, 3.5]
    assert rolling_avg([1, 2], 1) == [1, 2]


def test_plot_writes_png(tmp_path):
    rows = [
        {"generation": g, "best": g * 2.0, "average": g * 1.0, "worst": 0.0, "best_score": g * 10}
        for g in range(1, 6)
    ]
    out = plot_rows(rows, tmp_path / "ga_progress.png")
    assert out.exists()
