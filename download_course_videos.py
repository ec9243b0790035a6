#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
download_course_videos.py

Download Wistia-hosted course videos.
Supports:
- Explicit video ids (--id abc123,def456)
- Batch download from course manifests in ./jsons (--jsons)
- Verifying manifests against downloaded files (--verify)

Usage:
    python download_course_videos.py --id abc123 --resolution 720p --name lesson
    python download_course_videos.py --jsons
    python download_course_videos.py --verify
"""

import sys
from typing import List, Optional

from wistia_dl.config import apply_environment_defaults, parse_args
from wistia_dl.downloader import download_ids
from wistia_dl.logger import DownloadLogger
from wistia_dl.tracker import process_manifest_dir
from wistia_dl.verify import run_verification


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    apply_environment_defaults(args)

    if args.verify:
        return run_verification(args)

    logger = DownloadLogger()
    try:
        if args.jsons:
            return process_manifest_dir(args, logger)
        return download_ids(args.ids, args, logger)
    except KeyboardInterrupt:
        print("\nInterrupted. Completed items are saved; rerun to resume.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
