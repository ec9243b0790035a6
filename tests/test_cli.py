"""Regression tests for the command-line entry point."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import download_course_videos as cli
from wistia_dl.models import AssetVariant


@pytest.fixture(autouse=True)
def isolated_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("WISTIA_DL_TIMEOUT", "WISTIA_DL_EMBED_URL", "WISTIA_DL_USER_AGENT"):
        monkeypatch.delenv(name, raising=False)


def write_course(jsons: Path, downloaded: bool) -> Path:
    jsons.mkdir(exist_ok=True)
    path = jsons / "course.json"
    path.write_text(
        json.dumps(
            {
                "name": "CourseX",
                "item-count": 1,
                "items": [
                    {"index": 0, "dynamic-part": "abc123", "downloaded": downloaded, "name": "Intro", "type": "video"}
                ],
            }
        ),
        encoding="utf-8",
    )
    return path


def test_usage_error_without_mode():
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code != 0


def test_verify_mode_reports_missing_files(tmp_path, capsys):
    write_course(tmp_path / "jsons", downloaded=True)

    assert cli.main(["--verify"]) == 1
    assert "./CourseX/Intro.mp4" in capsys.readouterr().out


def test_jsons_mode_downloads_then_verifies(monkeypatch: pytest.MonkeyPatch, tmp_path):
    from wistia_dl import downloader

    manifest_path = write_course(tmp_path / "jsons", downloaded=False)
    monkeypatch.setattr(
        downloader,
        "fetch_catalog",
        lambda video_id, args: [AssetVariant(360, "https://cdn.example/abc123-360.bin")],
    )

    def fake_stream(url, destination, args):
        Path(destination).write_bytes(b"video")
        return 5

    monkeypatch.setattr(downloader, "stream_to_file", fake_stream)

    assert cli.main(["--jsons", "--no-progress"]) == 0
    assert (tmp_path / "CourseX" / "Intro.mp4").read_bytes() == b"video"
    assert json.loads(manifest_path.read_text(encoding="utf-8"))["items"][0]["downloaded"] is True
    assert cli.main(["--verify"]) == 0


def test_id_mode_returns_failure_code(monkeypatch: pytest.MonkeyPatch, tmp_path):
    from wistia_dl import downloader
    from wistia_dl.errors import CatalogNotFoundError

    def missing(video_id, args):
        raise CatalogNotFoundError("No asset list found in embed page")

    monkeypatch.setattr(downloader, "fetch_catalog", missing)

    assert cli.main(["--id", "nope", "--resolution", "720p", "--output", str(tmp_path)]) == 1
