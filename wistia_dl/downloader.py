"""Streaming downloads and the resolution fallback strategy."""

import os
from typing import List, Optional, Sequence, Tuple

from tqdm import tqdm

from .catalog import fetch_catalog
from .errors import (
    CatalogError,
    CatalogNotFoundError,
    FallbackExhaustedError,
    IncompleteDownloadError,
    ResolutionUnavailableError,
    TransportError,
    WistiaDownloadError,
)
from .logger import DownloadLogger
from .models import AUTO_RESOLUTION, CHUNK_SIZE, VIDEO_EXTENSION, AssetVariant
from .network import content_length, open_url, read_chunk
from .resolutions import (
    candidate_resolutions,
    resolution_table_for,
    select_asset_url,
    unlisted_heights,
)


def part_path_for(destination: str) -> str:
    return f"{destination}.part"


def stream_to_file(url: str, destination: str, args) -> int:
    """Stream *url* into *destination* and return the number of bytes written.

    Data goes to ``<destination>.part`` first and is renamed into place only
    after the full body arrived, so *destination* never holds a partial file.
    """
    part_path = part_path_for(destination)
    show_progress = getattr(args, "progress", True)

    response = open_url(
        url,
        timeout=getattr(args, "timeout", None),
        user_agent=getattr(args, "user_agent", None),
    )
    with response:
        total = content_length(response)
        written = 0
        # Unknown length: tqdm shows a running byte count instead of a bar
        with open(part_path, "wb") as handle, tqdm(
            total=total,
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            desc=os.path.basename(destination)[:50],
            disable=not show_progress,
            leave=False,
        ) as pbar:
            while True:
                chunk = read_chunk(response, CHUNK_SIZE, url)
                if not chunk:
                    break
                handle.write(chunk)
                written += len(chunk)
                pbar.update(len(chunk))

    if total is not None and written < total:
        raise IncompleteDownloadError(
            f"Received {written} of {total} bytes from {url}"
        )

    os.replace(part_path, destination)
    return written


def download_video(
    video_id: str,
    destination: str,
    args,
    logger: Optional[DownloadLogger] = None,
    resolution: Optional[str] = None,
) -> str:
    """Download *video_id* to *destination*, walking the fallback chain.

    Returns the resolution label that succeeded. Raises CatalogNotFoundError
    for a blank id and FallbackExhaustedError when no candidate could be
    downloaded; OSError from writing the destination propagates unchanged.
    """
    if not str(video_id).strip():
        raise CatalogNotFoundError("Missing video id")

    logger = logger or DownloadLogger()
    table = resolution_table_for(args)
    catalog: Optional[List[AssetVariant]] = None

    if resolution:
        candidates = [resolution]
    else:
        try:
            catalog = fetch_catalog(video_id, args)
        except (CatalogError, TransportError) as exc:
            logger.warning(
                f"Could not get available resolutions: {exc}. "
                "Falling back to default resolution list"
            )
            candidates = table.labels()
        else:
            for height in unlisted_heights(catalog, table):
                logger.skip(f"{height}p is not in the resolution table")
            candidates = candidate_resolutions(catalog, table)
            if not candidates:
                logger.warning("Catalog lists no known resolutions")

    attempts: List[Tuple[str, Exception]] = []
    for label in candidates:
        logger.info(f"[resolution] Trying {label}")
        try:
            # Without a cached catalog every attempt queries the endpoint again
            current = catalog if catalog is not None else fetch_catalog(video_id, args)
            asset_url = select_asset_url(current, label, table)
            size = stream_to_file(asset_url, destination, args)
        except ResolutionUnavailableError as exc:
            logger.skip(f"{label} not available, trying next resolution")
            attempts.append((label, exc))
            continue
        except (CatalogError, TransportError) as exc:
            logger.warning(f"{label} failed: {exc}")
            attempts.append((label, exc))
            continue

        logger.info(f"[download] Saved {destination} ({label}, {size} bytes)")
        return label

    raise FallbackExhaustedError(video_id, attempts)


def direct_destination(output: str, index: int, name: Optional[str]) -> str:
    """Destination for the *index*-th (1-based) id of a direct download."""
    stem = f"{name}{index}" if name else str(index)
    return os.path.join(output, stem + VIDEO_EXTENSION)


def download_ids(video_ids: Sequence[str], args, logger: Optional[DownloadLogger] = None) -> int:
    """Download explicit video ids. Returns a process exit code."""
    logger = logger or DownloadLogger()
    output = getattr(args, "output", None) or "."
    requested = getattr(args, "resolution", None)
    resolution = None if not requested or requested == AUTO_RESOLUTION else requested
    failed: List[str] = []

    try:
        os.makedirs(output, exist_ok=True)
    except OSError as exc:
        logger.error(f"Error creating output directory {output}: {exc}")
        return 1

    for index, video_id in enumerate(video_ids, start=1):
        destination = direct_destination(output, index, getattr(args, "name", None))
        logger.set_context(item=os.path.basename(destination), video_id=video_id)
        logger.info(f"Fetching video ID: {video_id}")
        try:
            download_video(video_id, destination, args, logger, resolution=resolution)
        except (WistiaDownloadError, OSError) as exc:
            logger.warning(f"Failed to download {video_id}: {exc}")
            failed.append(video_id)
        finally:
            logger.clear_context()

    if failed:
        print("\nThe following videos failed to download:")
        for video_id in failed:
            print(f"- {video_id}")
        return 1

    print(f"\nDownloaded {len(video_ids)} video(s).")
    return 0
