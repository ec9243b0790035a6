"""Batch processing of course manifests with per-item progress persistence."""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .downloader import download_video
from .errors import FailureAnalyzer, ManifestError, WistiaDownloadError
from .logger import DownloadLogger
from .manifest import (
    course_directory,
    download_target,
    find_manifests,
    load_manifest,
    write_manifest,
)
from .models import DEFAULT_JSONS_DIR, DEFAULT_OUTPUT_DIR


@dataclass
class BatchResult:
    """Outcome of processing one manifest."""
    path: str
    name: str
    downloaded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    unsaved: List[str] = field(default_factory=list)
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed


def process_manifest(
    path: str,
    args,
    logger: Optional[DownloadLogger] = None,
    analyzer: Optional[FailureAnalyzer] = None,
) -> BatchResult:
    """Download every pending video of the manifest at *path*.

    The manifest is rewritten after each successful item so an interrupted
    run resumes after the last completed download. Per-item failures are
    collected and never abort the batch. Raises ManifestError when the
    manifest itself cannot be loaded.
    """
    logger = logger or DownloadLogger()
    manifest = load_manifest(path)
    output_root = getattr(args, "output", None) or DEFAULT_OUTPUT_DIR
    result = BatchResult(path=path, name=manifest.name)

    if manifest.item_count != len(manifest.items):
        logger.warning(
            f"{path}: item-count is {manifest.item_count} but {len(manifest.items)} items are listed; "
            "using the listed items"
        )

    pending = manifest.pending_items()
    result.skipped = len(manifest.items) - len(pending)

    for item in pending:
        logger.set_context(manifest=manifest.name, item=item.name, video_id=item.dynamic_part)
        try:
            try:
                os.makedirs(course_directory(output_root, manifest.name), exist_ok=True)
            except OSError as exc:
                logger.warning(f"Error creating directory for {item.name}: {exc}. Skipping...")
                result.failed.append(item.name)
                if analyzer:
                    analyzer.categorize_and_record(item.name, exc)
                continue

            destination = download_target(output_root, manifest.name, item.name)
            try:
                download_video(item.dynamic_part, destination, args, logger)
            except (WistiaDownloadError, OSError) as exc:
                logger.warning(
                    f"Failed to download {item.name}: {exc}. Skipping to next video..."
                )
                result.failed.append(item.name)
                if analyzer:
                    analyzer.categorize_and_record(item.name, exc)
                continue

            item.downloaded = True
            result.downloaded.append(item.name)
            if not write_manifest(path, manifest):
                logger.warning(f"Could not save progress for {item.name}")
                result.unsaved.append(item.name)
        finally:
            logger.clear_context()

    if result.failed:
        print(f"\nThe following videos from {manifest.name} failed to download:")
        for name in result.failed:
            print(f"- {name}")
        print("\nYou can try downloading these videos again later.")

    return result


def process_manifest_dir(args, logger: Optional[DownloadLogger] = None) -> int:
    """Process every manifest in ``args.jsons_dir``. Returns a process exit code."""
    logger = logger or DownloadLogger()
    directory = getattr(args, "jsons_dir", None) or DEFAULT_JSONS_DIR
    analyzer = FailureAnalyzer(getattr(args, "error_log", None))

    manifest_paths = find_manifests(directory)
    if not manifest_paths:
        print(f"No manifest files found in {directory}")
        return 0

    failed_files: List[str] = []
    downloaded = 0
    for position, path in enumerate(manifest_paths, start=1):
        print(f"\nProcessing file {position}/{len(manifest_paths)}: {path}")
        try:
            result = process_manifest(path, args, logger, analyzer)
        except ManifestError as exc:
            logger.error(f"Error processing {path}: {exc}. Continuing with next file...")
            analyzer.categorize_and_record(os.path.basename(path), exc)
            failed_files.append(path)
            continue

        downloaded += len(result.downloaded)
        if not result.ok:
            failed_files.append(path)

    print(f"\nDownloaded {downloaded} video(s) from {len(manifest_paths)} manifest(s).")
    if failed_files:
        print("\nThe following files had errors:")
        for path in failed_files:
            print(f"- {path}")
        analyzer.print_summary()
        return 1

    return 0
