"""Exception types and failure analysis for the Wistia downloader."""

import sys
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .models import FailurePattern


class WistiaDownloadError(Exception):
    """Base class for every expected download failure."""


class TransportError(WistiaDownloadError):
    """Raised when a request fails: unreachable host, non-2xx status, or timeout."""


class IncompleteDownloadError(TransportError):
    """Raised when fewer bytes arrive than the server declared."""


class CatalogError(WistiaDownloadError):
    """Raised when the asset catalog cannot be extracted from an embed page."""


class CatalogNotFoundError(CatalogError):
    """The embed page does not contain an asset list."""


class MalformedCatalogError(CatalogError):
    """The asset list exists but is not the expected structure."""


class ResolutionUnavailableError(WistiaDownloadError):
    """The requested resolution is unknown or absent from the catalog."""


class ManifestError(WistiaDownloadError):
    """Raised when a manifest file cannot be read or does not validate."""


class FallbackExhaustedError(WistiaDownloadError):
    """Raised when every candidate resolution failed for a video."""

    def __init__(self, video_id: str, attempts: List[Tuple[str, Exception]]) -> None:
        self.video_id = video_id
        self.attempts = list(attempts)
        if self.attempts:
            tried = ", ".join(label for label, _ in self.attempts)
            message = f"No resolution could be downloaded for {video_id} (tried {tried})"
        else:
            message = f"No candidate resolutions for {video_id}"
        super().__init__(message)

    @property
    def last_error(self) -> Optional[Exception]:
        """The most significant error: the last one that was not an unavailability."""
        for _, error in reversed(self.attempts):
            if not isinstance(error, ResolutionUnavailableError):
                return error
        return self.attempts[-1][1] if self.attempts else None


class FailureAnalyzer:
    """Groups per-item failures into categories and suggests remediation."""

    CATEGORIES = (
        "transport",
        "catalog",
        "resolution_unavailable",
        "filesystem",
        "manifest",
        "unknown",
    )

    def __init__(self, error_log_path: Optional[str] = None) -> None:
        self.patterns: Dict[str, FailurePattern] = {
            category: FailurePattern(category) for category in self.CATEGORIES
        }
        self.total_failures = 0
        self.error_log_path = error_log_path

    @staticmethod
    def categorize(error: BaseException) -> str:
        """Map an exception to a failure category."""
        if isinstance(error, FallbackExhaustedError):
            inner = error.last_error
            if inner is None:
                return "resolution_unavailable"
            return FailureAnalyzer.categorize(inner)
        if isinstance(error, TransportError):
            return "transport"
        if isinstance(error, CatalogError):
            return "catalog"
        if isinstance(error, ResolutionUnavailableError):
            return "resolution_unavailable"
        if isinstance(error, ManifestError):
            return "manifest"
        if isinstance(error, OSError):
            return "filesystem"
        return "unknown"

    def categorize_and_record(self, name: Optional[str], error: BaseException) -> str:
        """Categorize an error and record it. Returns the category."""
        self.total_failures += 1
        category = self.categorize(error)
        message = str(error) or error.__class__.__name__
        self.patterns[category].record(name, message)

        if self.error_log_path:
            self._append_to_error_log(name, category, message)

        return category

    def _append_to_error_log(self, name: Optional[str], category: str, message: str) -> None:
        try:
            timestamp = datetime.now().isoformat()
            log_entry = f"[{timestamp}] [{category}] {name or 'unknown'}: {message}\n"
            with open(self.error_log_path, "a", encoding="utf-8") as f:
                f.write(log_entry)
        except OSError as e:
            # Don't fail the batch if error logging fails
            print(f"Warning: Failed to write to error log: {e}", file=sys.stderr)

    def get_recommendations(self) -> List[str]:
        """Generate recommendations based on recorded failures."""
        if self.total_failures == 0:
            return ["No failures recorded."]

        recommendations = []
        if self.patterns["transport"].count:
            recommendations.append(
                f"Network ({self.patterns['transport'].count}): check connectivity "
                "or raise --timeout, then rerun; completed items are skipped."
            )
        if self.patterns["catalog"].count:
            recommendations.append(
                f"Catalog ({self.patterns['catalog'].count}): the embed page had no usable "
                "asset list. Check the video ids or --embed-url."
            )
        if self.patterns["resolution_unavailable"].count:
            recommendations.append(
                f"Resolution ({self.patterns['resolution_unavailable'].count}): no listed "
                "resolution matched. Add the height to the 'resolutions' config table."
            )
        if self.patterns["filesystem"].count:
            recommendations.append(
                f"Filesystem ({self.patterns['filesystem'].count}): check permissions "
                "and free space under the output directory."
            )
        if self.patterns["manifest"].count:
            recommendations.append(
                f"Manifest ({self.patterns['manifest'].count}): fix or regenerate the "
                "listed manifest files."
            )
        if self.patterns["unknown"].count:
            recommendations.append(
                f"Unknown ({self.patterns['unknown'].count}): see the error log for details."
            )
        return recommendations

    def print_summary(self) -> None:
        """Print a formatted summary of failure categories."""
        if self.total_failures == 0:
            return

        print("\n" + "=" * 70)
        print("Failure Analysis")
        print("=" * 70)
        print(f"Total failures: {self.total_failures}\n")

        sorted_patterns = sorted(
            self.patterns.items(), key=lambda pair: pair[1].count, reverse=True
        )
        for category, pattern in sorted_patterns:
            if pattern.count > 0:
                print(f"{category.replace('_', ' ').title()}: {pattern.count}")
                if pattern.sample_messages:
                    print(f"  Sample: {pattern.sample_messages[0][:80]}")

        print()
        for rec in self.get_recommendations():
            print(f"- {rec}")
        print("=" * 70)

        if self.error_log_path:
            print(f"\nDetailed error log: {self.error_log_path}")
