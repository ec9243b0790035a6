"""Course manifest loading, validation, and crash-safe rewriting."""

import contextlib
import glob
import json
import os
import sys
from typing import Any, Dict, List

from .errors import ManifestError
from .models import VIDEO_EXTENSION, Manifest, ManifestItem

ITEM_FIELDS = {
    "index": ("index", int),
    "dynamic-part": ("dynamic_part", str),
    "downloaded": ("downloaded", bool),
    "name": ("name", str),
    "type": ("type", str),
}


def _check_type(value: Any, expected: type) -> bool:
    # bool is an int subclass; keep the two apart
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, expected)


def _parse_item(raw: Any, position: int) -> ManifestItem:
    if not isinstance(raw, dict):
        raise ManifestError(f"items[{position}] must be an object")

    values: Dict[str, Any] = {}
    for key, (attr, expected) in ITEM_FIELDS.items():
        if key not in raw:
            raise ManifestError(f"items[{position}] is missing '{key}'")
        value = raw[key]
        if not _check_type(value, expected):
            raise ManifestError(
                f"items[{position}].{key} must be {expected.__name__}, got {type(value).__name__}"
            )
        values[attr] = value

    extra = {key: value for key, value in raw.items() if key not in ITEM_FIELDS}
    return ManifestItem(extra=extra, **values)


def parse_manifest(data: Any) -> Manifest:
    """Validate decoded JSON and build a Manifest."""
    if not isinstance(data, dict):
        raise ManifestError("manifest must be a JSON object")

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ManifestError("manifest 'name' must be a non-empty string")

    raw_items = data.get("items")
    if not isinstance(raw_items, list):
        raise ManifestError("manifest 'items' must be an array")

    items = [_parse_item(raw, position) for position, raw in enumerate(raw_items)]

    item_count = data.get("item-count", len(items))
    if not _check_type(item_count, int):
        raise ManifestError("manifest 'item-count' must be an integer")

    extra = {
        key: value
        for key, value in data.items()
        if key not in ("name", "item-count", "items")
    }
    return Manifest(name=name, item_count=item_count, items=items, extra=extra)


def load_manifest(path: str) -> Manifest:
    """Read and validate the manifest at *path*."""
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Could not parse {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"Could not read {path}: {exc}") from exc

    try:
        return parse_manifest(data)
    except ManifestError as exc:
        raise ManifestError(f"{path}: {exc}") from exc


def item_to_dict(item: ManifestItem) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "index": item.index,
        "dynamic-part": item.dynamic_part,
        "downloaded": item.downloaded,
        "name": item.name,
        "type": item.type,
    }
    data.update(item.extra)
    return data


def manifest_to_dict(manifest: Manifest) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": manifest.name,
        "item-count": manifest.item_count,
        "items": [item_to_dict(item) for item in manifest.items],
    }
    data.update(manifest.extra)
    return data


def write_manifest(path: str, manifest: Manifest) -> bool:
    """Atomically overwrite *path* with *manifest*. Returns False on failure."""
    temp_path = f"{path}.tmp"
    payload = json.dumps(manifest_to_dict(manifest), indent=2, ensure_ascii=False) + "\n"

    try:
        with open(temp_path, "w", encoding="utf-8") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, path)
    except OSError as exc:
        print(f"Warning: Failed to update manifest {path}: {exc}", file=sys.stderr)
        with contextlib.suppress(OSError):
            os.remove(temp_path)
        return False
    return True


def sanitize_name(name: str) -> str:
    """Make *name* safe to use as a single path component."""
    cleaned = name.replace("/", "_")
    # "." and ".." name the current and parent directory
    if cleaned in ("", ".", ".."):
        return cleaned.replace(".", "_") or "_"
    return cleaned


def course_directory(output_root: str, manifest_name: str) -> str:
    return os.path.join(output_root, sanitize_name(manifest_name))


def download_target(output_root: str, manifest_name: str, item_name: str) -> str:
    """The file an item's video is written to."""
    return os.path.join(
        course_directory(output_root, manifest_name),
        sanitize_name(item_name) + VIDEO_EXTENSION,
    )


def find_manifests(directory: str) -> List[str]:
    """All ``*.json`` manifests in *directory*, sorted by path."""
    return sorted(glob.glob(os.path.join(directory, "*.json")))
