# tests/test_cli.py
import json
import logging

import numpy as np
import pytest
import structlog

from fftcorr.cli.main import detect_command, main, strip_settings_args
from fftcorr.io import read_series, write_series


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def series_files(tmp_path):
    sig = tmp_path / "signal.csv"
    tpl = tmp_path / "template.csv"
    write_series(sig, np.array([1.0, 2.0, 3.0, 4.0, 5.0]))
    write_series(tpl, np.array([1.0, 0.0, 0.0]))
    return sig, tpl


def test_strip_settings_args():
    argv = ["--settings", "a.json", "correlate", "--save-settings=b.csv", "x", "y"]
    cleaned, settings, save = strip_settings_args(argv)
    assert cleaned == ["correlate", "x", "y"]
    assert settings == "a.json"
    assert save == "b.csv"
    with pytest.raises(SystemExit):
        strip_settings_args(["--settings"])


def test_detect_command():
    assert detect_command(["--log-level", "DEBUG", "autocorr", "x"]) == "autocorr"
    assert detect_command(["--log-json", "correlate"]) == "correlate"
    assert detect_command(["-V"]) is None


def test_correlate_valid_to_file(series_files, tmp_path):
    sig, tpl = series_files
    out = tmp_path / "out.csv"
    assert main(["correlate", str(sig), str(tpl), "--mode", "valid", "-o", str(out)]) == 0
    np.testing.assert_allclose(read_series(out), [1.0, 2.0, 3.0], atol=1e-12)


def test_correlate_prints_full_to_stdout(series_files, capsys):
    sig, tpl = series_files
    assert main(["correlate", str(sig), str(tpl)]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 7
    np.testing.assert_allclose([float(v) for v in lines], [0, 0, 1, 2, 3, 4, 5], atol=1e-12)


def test_correlate_with_lags(series_files, capsys):
    sig, tpl = series_files
    assert main(["correlate", str(sig), str(tpl), "--mode", "same", "--lags", "--method", "direct"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert [line.split(",")[0] for line in lines] == ["-1", "0", "1", "2", "3"]
    assert [float(line.split(",")[1]) for line in lines] == [0.0, 1.0, 2.0, 3.0, 4.0]


def test_autocorr_defaults_to_same(series_files, tmp_path):
    sig, _ = series_files
    out = tmp_path / "auto.npy"
    assert main(["autocorr", str(sig), "-o", str(out), "--normalize", "energy"]) == 0
    y = np.load(out)
    assert y.shape == (5,)
    assert int(np.argmax(y)) == 2
    assert y[2] == pytest.approx(1.0)


def test_settings_file_sets_defaults(series_files, tmp_path):
    sig, tpl = series_files
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"correlate": {"mode": "same", "size_policy": "pow2"}}), encoding="utf-8")
    out = tmp_path / "out.npy"
    assert main(["--settings", str(settings), "correlate", str(sig), str(tpl), "-o", str(out)]) == 0
    assert np.load(out).shape == (5,)

    # explicit flags still win
    assert main(["--settings", str(settings), "correlate", str(sig), str(tpl), "--mode", "full", "-o", str(out)]) == 0
    assert np.load(out).shape == (7,)


def test_settings_without_mode_keep_command_default(series_files, tmp_path):
    sig, _ = series_files
    settings = tmp_path / "settings.csv"
    settings.write_text("key,value\nmethod,\"\"\"direct\"\"\"\n", encoding="utf-8")
    out = tmp_path / "auto.npy"
    assert main(["--settings", str(settings), "autocorr", str(sig), "-o", str(out)]) == 0
    assert np.load(out).shape == (5,)


def test_save_settings(series_files, tmp_path):
    sig, tpl = series_files
    saved = tmp_path / "saved.json"
    out = tmp_path / "out.npy"
    argv = ["--save-settings", str(saved), "correlate", str(sig), str(tpl), "--mode", "valid", "--plan-cache-size", "2", "-o", str(out)]
    assert main(argv) == 0
    data = json.loads(saved.read_text(encoding="utf-8"))
    assert data["correlate"]["mode"] == "valid"
    assert data["correlate"]["plan_cache_size"] == 2


def test_errors_return_exit_code_2(series_files, tmp_path):
    sig, tpl = series_files
    assert main(["correlate", str(tmp_path / "missing.csv"), str(tpl)]) == 2

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"colour": "red"}), encoding="utf-8")
    assert main(["--settings", str(bad), "correlate", str(sig), str(tpl)]) == 2

    assert main(["correlate", str(sig), str(tmp_path / "x.mp4")]) == 2


def test_out_of_range_npy_channel_returns_exit_code_2(tmp_path, capsys):
    m = tmp_path / "m.npy"
    np.save(m, np.array([[1.0, 3.0], [2.0, 4.0], [0.5, 0.5]]))
    assert main(["autocorr", str(m), "--channel", "5"]) == 2
    err = capsys.readouterr().err
    assert "command_failed" in err
    assert "Traceback" not in err

    assert main(["autocorr", str(m), "--channel", "1"]) == 0


def test_invalid_choice_exits(series_files):
    sig, tpl = series_files
    with pytest.raises(SystemExit):
        main(["correlate", str(sig), str(tpl), "--mode", "circular"])


def test_version(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--version"])
    assert info.value.code == 0
    assert "fftcorr" in capsys.readouterr().out
