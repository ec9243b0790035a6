"""Data models, tables, and constants for the Wistia downloader."""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# Constants
DEFAULT_EMBED_URL = "https://fast.wistia.net/embed/iframe/{video_id}"
DEFAULT_TIMEOUT = 30.0  # Seconds per connect/read on every request
DEFAULT_RESOLUTION = "1080p"
AUTO_RESOLUTION = "auto"
DEFAULT_JSONS_DIR = "./jsons"
DEFAULT_OUTPUT_DIR = "."
VIDEO_EXTENSION = ".mp4"
VIDEO_ITEM_TYPE = "video"
CHUNK_SIZE = 64 * 1024

# User-Agent pool; the embed endpoint rejects some default client strings
USER_AGENTS = [
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15',
    'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0',
]

# Label -> pixel height. 716p is a real encoding height the platform emits.
DEFAULT_RESOLUTION_HEIGHTS: Dict[str, int] = {
    "1080p": 1080,
    "720p": 720,
    "716p": 716,
    "540p": 540,
    "480p": 480,
    "360p": 360,
    "220p": 220,
}

RESOLUTION_LABEL_PATTERN = re.compile(r"^(\d+)p$")

# Environment variable names
ENV_TIMEOUT = "WISTIA_DL_TIMEOUT"
ENV_EMBED_URL = "WISTIA_DL_EMBED_URL"
ENV_USER_AGENT = "WISTIA_DL_USER_AGENT"


@dataclass(frozen=True)
class AssetVariant:
    """One quality variant discovered in a catalog."""
    height: int
    url: str


@dataclass
class ManifestItem:
    """A single entry of a course manifest."""
    index: int
    dynamic_part: str
    downloaded: bool
    name: str
    type: str
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_video(self) -> bool:
        return self.type == VIDEO_ITEM_TYPE


@dataclass
class Manifest:
    """A course manifest: a name plus its items and their completion state."""
    name: str
    item_count: int
    items: List[ManifestItem] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    def video_items(self) -> List[ManifestItem]:
        return [item for item in self.items if item.is_video]

    def pending_items(self) -> List[ManifestItem]:
        """Video items that still need to be downloaded."""
        return [item for item in self.items if item.is_video and not item.downloaded]


@dataclass
class FailurePattern:
    """Tracks one category of item failures."""
    category: str
    count: int = 0
    names: List[str] = field(default_factory=list)
    sample_messages: List[str] = field(default_factory=list)

    def record(self, name: Optional[str], message: str) -> None:
        self.count += 1
        if name and name not in self.names:
            self.names.append(name)
        # Keep only the first 5 sample messages
        if len(self.sample_messages) < 5 and message not in self.sample_messages:
            self.sample_messages.append(message)


def parse_resolution_label(label: str) -> Optional[int]:
    """Return the height encoded in a label like '720p', or None."""
    match = RESOLUTION_LABEL_PATTERN.match(str(label).strip())
    if not match:
        return None
    return int(match.group(1))


class ResolutionTable:
    """Extensible mapping between resolution labels and pixel heights."""

    def __init__(self, entries: Optional[Dict[str, int]] = None) -> None:
        self._heights: Dict[str, int] = {}
        source = DEFAULT_RESOLUTION_HEIGHTS if entries is None else entries
        for label, height in source.items():
            self.add(label, height)

    def add(self, label: str, height: int) -> None:
        """Register *label* for *height*. Raises ValueError on bad input."""
        cleaned = str(label).strip()
        if parse_resolution_label(cleaned) is None:
            raise ValueError(f"Invalid resolution label '{label}' (expected e.g. '720p')")
        if isinstance(height, bool) or not isinstance(height, int) or height <= 0:
            raise ValueError(f"Invalid height for {cleaned}: {height!r}")
        self._heights[cleaned] = height

    def height_for(self, label: str) -> Optional[int]:
        return self._heights.get(str(label).strip())

    def label_for(self, height: int) -> Optional[str]:
        for label, value in self._heights.items():
            if value == height:
                return label
        return None

    def labels(self) -> List[str]:
        """All labels, highest height first."""
        return [
            label
            for label, _ in sorted(self._heights.items(), key=lambda pair: pair[1], reverse=True)
        ]
