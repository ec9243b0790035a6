import json
import sys
from pathlib import Path
from types import SimpleNamespace

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from wistia_dl import verify


def write_manifest_file(path: Path, name, items):
    path.write_text(
        json.dumps({"name": name, "item-count": len(items), "items": items}, indent=2),
        encoding="utf-8",
    )
    return path


def item(index, name, downloaded, kind="video"):
    return {"index": index, "dynamic-part": f"id{index}", "downloaded": downloaded, "name": name, "type": kind}


def test_marked_but_missing_is_reported_separately(tmp_path):
    jsons = tmp_path / "jsons"
    jsons.mkdir()
    path = write_manifest_file(
        jsons / "course.json",
        "Course",
        [
            item(0, "Present", True),
            item(1, "Lost", True),
            item(2, "Pending", False),
            item(3, "Quiz", False, kind="quiz"),
        ],
    )
    (tmp_path / "Course").mkdir()
    (tmp_path / "Course" / "Present.mp4").write_bytes(b"data")

    report = verify.verify_manifests([str(path)], str(tmp_path))

    assert report.total == 3
    assert report.present == 1
    assert report.marked_missing == [str(tmp_path / "Course" / "Lost.mp4")]
    assert report.missing == [str(tmp_path / "Course" / "Pending.mp4")]
    assert report.missing_count == 2
    assert not report.ok


def test_file_present_counts_even_when_not_marked(tmp_path):
    path = write_manifest_file(tmp_path / "c.json", "C", [item(0, "A/B", False)])
    (tmp_path / "C").mkdir()
    (tmp_path / "C" / "A_B.mp4").write_bytes(b"data")

    report = verify.verify_manifests([str(path)], str(tmp_path))

    assert report.present == 1 and report.ok


def test_directory_at_target_path_is_not_a_download(tmp_path):
    path = write_manifest_file(tmp_path / "c.json", "C", [item(0, "Intro", True)])
    (tmp_path / "C" / "Intro.mp4").mkdir(parents=True)

    report = verify.verify_manifests([str(path)], str(tmp_path))

    assert report.present == 0
    assert report.marked_missing == [str(tmp_path / "C" / "Intro.mp4")]


def test_run_verification_exit_codes_and_output(tmp_path, capsys):
    jsons = tmp_path / "jsons"
    jsons.mkdir()
    path = write_manifest_file(jsons / "course.json", "Course", [item(0, "Lost", True), item(1, "Todo", False)])
    before = path.read_bytes()
    args = SimpleNamespace(jsons_dir=str(jsons), output=str(tmp_path))

    assert verify.run_verification(args) == 1

    out = capsys.readouterr().out
    assert "Total videos: 2" in out
    assert "Downloaded: 0" in out
    assert "Missing: 2" in out
    assert "Marked as downloaded but file missing:" in out
    assert "Not downloaded yet:" in out
    assert path.read_bytes() == before

    (tmp_path / "Course").mkdir()
    (tmp_path / "Course" / "Lost.mp4").write_bytes(b"x")
    (tmp_path / "Course" / "Todo.mp4").write_bytes(b"x")

    assert verify.run_verification(args) == 0
    assert "All files are downloaded successfully!" in capsys.readouterr().out


def test_unreadable_manifest_fails_verification(tmp_path, capsys):
    jsons = tmp_path / "jsons"
    jsons.mkdir()
    (jsons / "broken.json").write_text("[]", encoding="utf-8")

    code = verify.run_verification(SimpleNamespace(jsons_dir=str(jsons), output=str(tmp_path)))

    assert code == 1
    assert "could not be read" in capsys.readouterr().out
