"""Asset catalog discovery from Wistia embed pages."""

import json
import re
import urllib.parse
from typing import List, Optional

try:
    from yt_dlp.utils import int_or_none, url_or_none
except ImportError:
    raise ImportError("yt-dlp is not installed. Run: pip install -e .")

from .errors import CatalogNotFoundError, MalformedCatalogError
from .models import CHUNK_SIZE, DEFAULT_EMBED_URL, AssetVariant
from .network import open_url, read_chunk

# The media JSON is embedded in a script block; only the asset list is needed.
ASSETS_MARKER = re.compile(r'"assets"\s*:\s*\[')

_decoder = json.JSONDecoder()


def build_embed_url(video_id: str, template: Optional[str] = None) -> str:
    """Build the embed page URL for *video_id*."""
    cleaned = str(video_id).strip()
    if not cleaned:
        raise CatalogNotFoundError("Missing video id")
    return (template or DEFAULT_EMBED_URL).format(
        video_id=urllib.parse.quote(cleaned, safe="")
    )


def extract_assets(body: str, base_url: Optional[str] = None) -> List[AssetVariant]:
    """Extract the (height, url) variants embedded in an embed page body.

    The asset list is decoded directly from the position of its opening
    bracket, so whatever follows it in the page is ignored. Entries missing a
    numeric height or a usable URL are skipped; anything that is not a list of
    objects is reported as malformed. Relative and protocol-relative URLs are
    resolved against *base_url*, the page they were found on.
    """
    match = ASSETS_MARKER.search(body)
    if not match:
        raise CatalogNotFoundError("No asset list found in embed page")

    start = match.end() - 1
    try:
        payload, _ = _decoder.raw_decode(body, start)
    except json.JSONDecodeError as exc:
        raise MalformedCatalogError(f"Asset list is not valid JSON: {exc}") from exc

    if not isinstance(payload, list):
        raise MalformedCatalogError("Asset list is not an array")

    variants: List[AssetVariant] = []
    for position, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise MalformedCatalogError(
                f"Asset #{position} is a {type(entry).__name__}, expected an object"
            )
        height = entry.get("height")
        if isinstance(height, bool):
            continue
        height = int_or_none(height)
        url = url_or_none(entry.get("url"))
        if url is not None and base_url:
            url = urllib.parse.urljoin(base_url, url)
        if height is None or height <= 0 or url is None:
            continue
        variants.append(AssetVariant(height=height, url=url))
    return variants


def _read_body(response, url: str) -> str:
    chunks = []
    while True:
        chunk = read_chunk(response, CHUNK_SIZE, url)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks).decode("utf-8", "replace")


def fetch_catalog(video_id: str, args) -> List[AssetVariant]:
    """Query the embed endpoint for *video_id* and return its variants."""
    url = build_embed_url(video_id, getattr(args, "embed_url", None))
    response = open_url(
        url,
        timeout=getattr(args, "timeout", None),
        user_agent=getattr(args, "user_agent", None),
    )
    with response:
        body = _read_body(response, url)
    return extract_assets(body, base_url=url)
