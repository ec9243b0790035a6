"""Wistia course video downloader package."""

# Import main components for easier access
from .catalog import build_embed_url, extract_assets, fetch_catalog
from .config import apply_environment_defaults, parse_args, positive_float, split_ids
from .downloader import download_ids, download_video, stream_to_file
from .errors import (
    CatalogError,
    CatalogNotFoundError,
    FailureAnalyzer,
    FallbackExhaustedError,
    IncompleteDownloadError,
    MalformedCatalogError,
    ManifestError,
    ResolutionUnavailableError,
    TransportError,
    WistiaDownloadError,
)
from .logger import DownloadLogger
from .manifest import (
    download_target,
    find_manifests,
    load_manifest,
    parse_manifest,
    write_manifest,
)
from .models import (
    DEFAULT_RESOLUTION_HEIGHTS,
    DEFAULT_TIMEOUT,
    AssetVariant,
    Manifest,
    ManifestItem,
    ResolutionTable,
)
from .resolutions import candidate_resolutions, select_asset_url
from .tracker import BatchResult, process_manifest, process_manifest_dir
from .verify import VerificationReport, run_verification, verify_manifests

__all__ = [
    # Main entry points
    "parse_args",
    "apply_environment_defaults",
    "download_ids",
    "process_manifest_dir",
    "run_verification",
    # Core operations
    "fetch_catalog",
    "extract_assets",
    "build_embed_url",
    "select_asset_url",
    "candidate_resolutions",
    "download_video",
    "stream_to_file",
    "process_manifest",
    "verify_manifests",
    # Manifest handling
    "load_manifest",
    "parse_manifest",
    "write_manifest",
    "download_target",
    "find_manifests",
    # Models and data structures
    "AssetVariant",
    "Manifest",
    "ManifestItem",
    "ResolutionTable",
    "BatchResult",
    "VerificationReport",
    "DownloadLogger",
    "FailureAnalyzer",
    # Errors
    "WistiaDownloadError",
    "TransportError",
    "IncompleteDownloadError",
    "CatalogError",
    "CatalogNotFoundError",
    "MalformedCatalogError",
    "ResolutionUnavailableError",
    "FallbackExhaustedError",
    "ManifestError",
    # Configuration
    "positive_float",
    "split_ids",
    # Constants
    "DEFAULT_RESOLUTION_HEIGHTS",
    "DEFAULT_TIMEOUT",
]
