"""Read-only audit of manifests against downloaded files."""

import os
from dataclasses import dataclass, field
from typing import Iterable, List

from .errors import ManifestError
from .manifest import download_target, find_manifests, load_manifest
from .models import DEFAULT_JSONS_DIR, DEFAULT_OUTPUT_DIR, Manifest


@dataclass
class VerificationReport:
    total: int = 0
    present: int = 0
    missing: List[str] = field(default_factory=list)
    marked_missing: List[str] = field(default_factory=list)
    unreadable: List[str] = field(default_factory=list)

    @property
    def missing_count(self) -> int:
        return len(self.missing) + len(self.marked_missing)

    @property
    def ok(self) -> bool:
        return self.missing_count == 0 and not self.unreadable


def verify_manifest(manifest: Manifest, output_root: str, report: VerificationReport) -> None:
    """Check every video item of *manifest* and add the findings to *report*."""
    for item in manifest.video_items():
        report.total += 1
        expected_path = download_target(output_root, manifest.name, item.name)
        if os.path.isfile(expected_path):
            report.present += 1
        elif item.downloaded:
            report.marked_missing.append(expected_path)
        else:
            report.missing.append(expected_path)


def verify_manifests(paths: Iterable[str], output_root: str = DEFAULT_OUTPUT_DIR) -> VerificationReport:
    report = VerificationReport()
    for path in paths:
        try:
            manifest = load_manifest(path)
        except ManifestError as exc:
            print(f"Warning: {exc}")
            report.unreadable.append(path)
            continue
        verify_manifest(manifest, output_root, report)
    return report


def print_report(report: VerificationReport) -> None:
    print("\nDownload Status:")
    print(f"Total videos: {report.total}")
    print(f"Downloaded: {report.present}")
    print(f"Missing: {report.missing_count}")

    if report.marked_missing:
        print("\nMarked as downloaded but file missing:")
        for path in report.marked_missing:
            print(f"- {path}")

    if report.missing:
        print("\nNot downloaded yet:")
        for path in report.missing:
            print(f"- {path}")

    if report.unreadable:
        print("\nManifests that could not be read:")
        for path in report.unreadable:
            print(f"- {path}")

    if report.ok:
        print("\nAll files are downloaded successfully!")


def run_verification(args) -> int:
    """Verify every manifest in ``args.jsons_dir``. Returns a process exit code."""
    directory = getattr(args, "jsons_dir", None) or DEFAULT_JSONS_DIR
    output_root = getattr(args, "output", None) or DEFAULT_OUTPUT_DIR

    paths = find_manifests(directory)
    if not paths:
        print(f"No manifest files found in {directory}")

    report = verify_manifests(paths, output_root)
    print_report(report)
    return 0 if report.ok else 1
