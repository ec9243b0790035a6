"""Console logger with batch context for the Wistia downloader."""

import sys
from typing import Optional


class DownloadLogger:
    """Prints progress and problems, prefixed with the current item context."""

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet
        self.current_manifest: Optional[str] = None
        self.current_item: Optional[str] = None
        self.current_video_id: Optional[str] = None
        self.skipped_resolutions = 0
        self.warnings = 0
        self.errors = 0

    def set_context(
        self,
        manifest: Optional[str] = None,
        item: Optional[str] = None,
        video_id: Optional[str] = None,
    ) -> None:
        self.current_manifest = manifest
        self.current_item = item
        self.current_video_id = video_id

    def clear_context(self) -> None:
        self.set_context()

    def _format_with_context(self, message: str) -> str:
        context_parts = []
        if self.current_manifest:
            context_parts.append(f"manifest={self.current_manifest}")
        if self.current_item:
            context_parts.append(f"item={self.current_item}")
        if self.current_video_id:
            context_parts.append(f"video_id={self.current_video_id}")
        if context_parts:
            return f"[{' '.join(context_parts)}] {message}"
        return message

    def _print(self, message: str, file=None) -> None:
        print(self._format_with_context(message), file=file or sys.stdout)

    @staticmethod
    def _ensure_text(message) -> str:
        if isinstance(message, bytes):
            return message.decode("utf-8", "ignore")
        return str(message)

    def info(self, message) -> None:
        if not self.quiet:
            self._print(self._ensure_text(message))

    def skip(self, message) -> None:
        """An expected, non-error skip such as a missing resolution."""
        self.skipped_resolutions += 1
        self.info(f"[skip] {self._ensure_text(message)}")

    def warning(self, message) -> None:
        self.warnings += 1
        self._print(self._ensure_text(message), file=sys.stderr)

    def error(self, message) -> None:
        self.errors += 1
        self._print(self._ensure_text(message), file=sys.stderr)
