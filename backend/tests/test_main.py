"""Tests for the histstats CLI."""

import json
from unittest.mock import patch

import numpy as np
import pytest

from main import analyse, build_parser, init_sentry, run


@pytest.mark.smoke
def test_key_value_output(image_file, grid_2x2, capsys):
    path = image_file(grid_2x2)
    assert run([path]) == 0
    out = capsys.readouterr().out.splitlines()
    assert f"IMAGE={path}" in out
    assert "WIDTH=2" in out
    assert "HEIGHT=2" in out
    assert "MEAN=25.0" in out
    assert "VARIANCE=125.0" in out


def test_json_output(image_file, grid_2x2, capsys):
    run([image_file(grid_2x2), "--json"])
    result = json.loads(capsys.readouterr().out)
    assert result["mean"] == 25.0
    assert result["variance"] == 125.0
    assert "speedup" not in result


def test_compare_output(image_file, random_grid, capsys):
    assert run([image_file(random_grid), "--compare", "--repeat", "1"]) == 0
    out = capsys.readouterr().out
    assert "DIRECT_NS=" in out
    assert "HISTOGRAM_NS=" in out
    assert "SPEEDUP=" in out


def test_analyse_compare_agrees(image_file, random_grid):
    result = analyse(image_file(random_grid), compare=True, repeat=1)
    assert result["agree"] is True
    assert result["width"] == 640
    assert result["height"] == 480


def test_failure_continues_and_exits_nonzero(image_file, grid_2x2, tmp_path, capsys):
    good = image_file(grid_2x2)
    missing = str(tmp_path / "missing.png")
    with patch("main.sentry_sdk.capture_exception") as capture:
        code = run([missing, good])
    assert code == 1
    capture.assert_called_once()
    captured = capsys.readouterr()
    assert "missing.png" in captured.err
    assert "MEAN=25.0" in captured.out


def test_zero_area_image_reported(tmp_path, capsys):
    """A 0x0 grid can't come from a PNG, so patch the loader."""
    with patch("main.load_gray", return_value=np.zeros((0, 0), dtype=np.uint8)):
        with patch("main.sentry_sdk.capture_exception"):
            code = run([str(tmp_path / "empty.png")])
    assert code == 1
    assert "undefined" in capsys.readouterr().err


def test_invalid_repeat(image_file, grid_2x2):
    assert run([image_file(grid_2x2), "--repeat", "0"]) == 2


def test_parser_requires_image():
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args([])
    assert exc.value.code == 2


def test_sentry_disabled_without_consent(tmp_path):
    with patch("main.os.path.expanduser", return_value=str(tmp_path / "absent")):
        with patch("main.sentry_sdk.init") as init:
            init_sentry()
    assert init.call_args.kwargs["dsn"] == ""


def test_sentry_enabled_with_consent(tmp_path, monkeypatch):
    consent = tmp_path / "telemetry_consent"
    consent.write_text("yes\n")
    monkeypatch.setenv("SENTRY_DSN", "https://public@example.invalid/1")
    with patch("main.os.path.expanduser", return_value=str(consent)):
        with patch("main.sentry_sdk.init") as init:
            init_sentry()
    assert init.call_args.kwargs["dsn"] == "https://public@example.invalid/1"
