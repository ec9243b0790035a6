from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from wistia_dl import config
from wistia_dl.models import DEFAULT_EMBED_URL, DEFAULT_TIMEOUT, ENV_EMBED_URL, ENV_TIMEOUT


@pytest.fixture(autouse=True)
def isolated_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path):
    # parse_args reads ./config.json by default
    monkeypatch.chdir(tmp_path)


def make_args(**overrides):
    defaults = {
        "timeout": None,
        "embed_url": None,
        "user_agent": None,
        "extra_resolutions": {},
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def test_ids_are_split_on_commas_and_repeats():
    args = config.parse_args(["--id", "abc,def", "-i", "ghi", "--id", "abc"])

    assert args.ids == ["abc", "def", "ghi", "abc"]
    assert args.resolution == "1080p"
    assert args.jsons is False and args.verify is False


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["--jsons", "--verify"],
        ["--id", "abc", "--jsons"],
        ["--id", " , "],
    ],
)
def test_exactly_one_mode_is_required(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        config.parse_args(argv)

    assert excinfo.value.code == 2
    assert "usage:" in capsys.readouterr().err


def test_config_file_supplies_defaults(tmp_path, capsys):
    config_path = tmp_path / "settings.json"
    config_path.write_text(
        json.dumps({"timeout": 5, "output": "videos", "resolutions": {"1440p": 1440}, "bogus": 1}),
        encoding="utf-8",
    )

    args = config.parse_args(["--config", str(config_path), "--jsons"])
    config.apply_environment_defaults(args, environ={})

    captured = capsys.readouterr()
    assert "Unknown config keys ignored: bogus" in captured.err
    assert args.timeout == 5
    assert args.output == "videos"
    assert args.resolution_table.height_for("1440p") == 1440
    assert args.resolution_table.height_for("716p") == 716


def test_cli_values_override_config_file(tmp_path):
    (tmp_path / "config.json").write_text(json.dumps({"timeout": 5}), encoding="utf-8")

    args = config.parse_args(["--verify", "--timeout", "12"])

    assert args.timeout == 12.0


def test_invalid_config_file_is_ignored(tmp_path, capsys):
    (tmp_path / "config.json").write_text("{oops", encoding="utf-8")

    args = config.parse_args(["--verify"])

    assert args.jsons_dir == "./jsons"
    assert "Failed to parse config file" in capsys.readouterr().err


def test_environment_fills_unset_values():
    args = make_args()
    config.apply_environment_defaults(
        args, environ={ENV_TIMEOUT: "45", ENV_EMBED_URL: "http://mirror.test/e/{video_id}"}
    )

    assert args.timeout == 45.0
    assert args.embed_url == "http://mirror.test/e/{video_id}"
    assert args.user_agent is None


def test_explicit_values_take_precedence_over_environment():
    args = make_args(timeout=3.0, embed_url="http://cli.test/{video_id}")
    config.apply_environment_defaults(args, environ={ENV_TIMEOUT: "45", ENV_EMBED_URL: "http://env.test/{video_id}"})

    assert args.timeout == 3.0
    assert args.embed_url == "http://cli.test/{video_id}"


def test_invalid_environment_timeout_falls_back_to_default(capsys):
    args = make_args()
    config.apply_environment_defaults(args, environ={ENV_TIMEOUT: "-1"})

    assert args.timeout == DEFAULT_TIMEOUT
    assert args.embed_url == DEFAULT_EMBED_URL
    assert "Ignoring non-positive" in capsys.readouterr().err


def test_embed_url_without_placeholder_gets_one(capsys):
    args = make_args(embed_url="http://mirror.test/embed/")
    config.apply_environment_defaults(args, environ={})

    assert args.embed_url == "http://mirror.test/embed/{video_id}"


def test_bad_resolution_entries_are_skipped(capsys):
    args = make_args(extra_resolutions={"2160p": 2160, "huge": 9000})
    config.apply_environment_defaults(args, environ={})

    assert "2160p" in args.resolution_table
    assert "huge" not in args.resolution_table
    assert "Invalid resolution label" in capsys.readouterr().err


@pytest.mark.parametrize("value", ["0", "-3", "abc"])
def test_positive_float_rejects_invalid_values(value):
    with pytest.raises(argparse.ArgumentTypeError):
        config.positive_float(value)
