"""Configuration and argument parsing for the Wistia downloader."""

import argparse
import json
import os
import re
import sys
from typing import Any, Dict, Iterable, List, Optional

from .models import (
    AUTO_RESOLUTION,
    DEFAULT_EMBED_URL,
    DEFAULT_JSONS_DIR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RESOLUTION,
    DEFAULT_TIMEOUT,
    ENV_EMBED_URL,
    ENV_TIMEOUT,
    ENV_USER_AGENT,
    ResolutionTable,
)

DEFAULT_CONFIG_PATH = "config.json"

VALID_CONFIG_KEYS = {
    "output",
    "jsons_dir",
    "timeout",
    "embed_url",
    "user_agent",
    "resolution",
    "resolutions",
    "error_log",
    "progress",
}


def positive_float(value: str) -> float:
    """Return *value* parsed as a positive number for argparse."""
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise argparse.ArgumentTypeError("Expected a positive number") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("Expected a positive number")

    return parsed


def split_ids(values: Optional[Iterable[str]]) -> List[str]:
    """Flatten repeated and comma-separated ``--id`` values, dropping blanks.

    Order and repeats are kept, so the i-th id always maps to file number i.
    """
    ids: List[str] = []
    for value in values or []:
        for part in re.split(r"[,\s]+", value):
            cleaned = part.strip()
            if cleaned:
                ids.append(cleaned)
    return ids


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Load configuration defaults from a JSON file.

    Returns an empty dictionary when the file is absent or unusable, so a bad
    config never blocks a run.
    """
    if not config_path or not os.path.exists(config_path):
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except json.JSONDecodeError as exc:
        print(f"Warning: Failed to parse config file {config_path}: {exc}. Ignoring.", file=sys.stderr)
        return {}
    except OSError as exc:
        print(f"Warning: Failed to read config file {config_path}: {exc}. Ignoring.", file=sys.stderr)
        return {}

    if not isinstance(config, dict):
        print(f"Warning: Config file {config_path} must contain a JSON object. Ignoring.", file=sys.stderr)
        return {}

    invalid_keys = set(config.keys()) - VALID_CONFIG_KEYS
    if invalid_keys:
        print(f"Warning: Unknown config keys ignored: {', '.join(sorted(invalid_keys))}", file=sys.stderr)

    return {k: v for k, v in config.items() if k in VALID_CONFIG_KEYS}


def _config_path_from_argv(argv: List[str]) -> str:
    if "--config" in argv:
        config_idx = argv.index("--config")
        if config_idx + 1 < len(argv):
            return argv[config_idx + 1]
    return DEFAULT_CONFIG_PATH


def build_parser(config: Optional[Dict[str, Any]] = None) -> argparse.ArgumentParser:
    config = config or {}
    parser = argparse.ArgumentParser(
        prog="wistia-dl",
        description="Download Wistia-hosted videos by id or from course manifest files.",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to JSON configuration file (default: {DEFAULT_CONFIG_PATH})",
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "--id",
        "-i",
        dest="ids",
        action="append",
        metavar="ID[,ID...]",
        help="Wistia video id(s), comma-separated; may be repeated",
    )
    mode.add_argument(
        "--jsons",
        action="store_true",
        help="Download videos listed in the manifest files of --jsons-dir",
    )
    mode.add_argument(
        "--verify",
        action="store_true",
        help="Check that every video listed in the manifests exists on disk",
    )

    parser.add_argument(
        "--resolution",
        "-r",
        default=config.get("resolution", DEFAULT_RESOLUTION),
        help=(
            f"Video resolution for --id downloads, e.g. 720p (default: {DEFAULT_RESOLUTION}). "
            f"Use '{AUTO_RESOLUTION}' to pick the best available one"
        ),
    )
    parser.add_argument(
        "--name",
        "-n",
        default=None,
        help="Output filename prefix for --id downloads",
    )
    parser.add_argument(
        "--jsons-dir",
        default=config.get("jsons_dir", DEFAULT_JSONS_DIR),
        help=f"Directory holding manifest files (default: {DEFAULT_JSONS_DIR})",
    )
    parser.add_argument(
        "--output",
        default=config.get("output", DEFAULT_OUTPUT_DIR),
        help="Directory course folders and videos are written to (default: current directory)",
    )
    parser.add_argument(
        "--timeout",
        type=positive_float,
        default=config.get("timeout"),
        help=f"Network timeout in seconds for each request (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--embed-url",
        default=config.get("embed_url"),
        help="Embed page URL template containing '{video_id}'",
    )
    parser.add_argument(
        "--user-agent",
        default=config.get("user_agent"),
        help="User-Agent header to send (default: a random browser string)",
    )
    parser.add_argument(
        "--no-progress",
        dest="progress",
        action="store_false",
        help="Disable progress bars",
    )
    parser.set_defaults(progress=bool(config.get("progress", True)))
    parser.add_argument(
        "--error-log",
        default=config.get("error_log"),
        help="Append a line per failed item to this file",
    )
    parser.set_defaults(extra_resolutions=config.get("resolutions") or {})
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments, using config file values as defaults."""
    argv = list(sys.argv[1:] if argv is None else argv)

    config_path = _config_path_from_argv(argv)
    config = load_config_file(config_path)
    if config:
        print(f"Loaded configuration from {config_path}")

    parser = build_parser(config)
    args = parser.parse_args(argv)
    args.ids = split_ids(args.ids)
    if args.ids == [] and not args.jsons and not args.verify:
        parser.error("--id requires at least one video id")
    return args


def _normalize_env_str(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _env_timeout(value: Optional[str]) -> Optional[float]:
    cleaned = _normalize_env_str(value)
    if cleaned is None:
        return None
    try:
        parsed = float(cleaned)
    except ValueError:
        print(f"Warning: Ignoring invalid {ENV_TIMEOUT}={value!r}", file=sys.stderr)
        return None
    if parsed <= 0:
        print(f"Warning: Ignoring non-positive {ENV_TIMEOUT}={value!r}", file=sys.stderr)
        return None
    return parsed


def build_resolution_table(extra: Optional[Dict[str, Any]]) -> ResolutionTable:
    """Default resolution table plus configured ``label: height`` entries."""
    table = ResolutionTable()
    if not extra:
        return table
    if not isinstance(extra, dict):
        print("Warning: 'resolutions' config must be an object of label: height. Ignoring.", file=sys.stderr)
        return table
    for label, height in extra.items():
        try:
            table.add(label, height)
        except ValueError as exc:
            print(f"Warning: {exc}. Ignoring.", file=sys.stderr)
    return table


def apply_environment_defaults(args, environ: Optional[Dict[str, str]] = None) -> None:
    """Fill unset network settings from the environment, then built-in defaults."""

    if environ is None:
        environ = os.environ

    if not getattr(args, "timeout", None):
        args.timeout = _env_timeout(environ.get(ENV_TIMEOUT)) or DEFAULT_TIMEOUT

    if not getattr(args, "embed_url", None):
        args.embed_url = _normalize_env_str(environ.get(ENV_EMBED_URL)) or DEFAULT_EMBED_URL
    if "{video_id}" not in args.embed_url:
        print(
            f"Warning: embed URL {args.embed_url!r} has no '{{video_id}}' placeholder; appending the id.",
            file=sys.stderr,
        )
        args.embed_url = args.embed_url.rstrip("/") + "/{video_id}"

    if not getattr(args, "user_agent", None):
        args.user_agent = _normalize_env_str(environ.get(ENV_USER_AGENT))

    args.resolution_table = build_resolution_table(getattr(args, "extra_resolutions", None))
