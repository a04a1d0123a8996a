"""Local disk storage for uploaded certificate files."""

from __future__ import annotations

import io
import logging
import threading
import time
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ..errors import StorageError, ValidationError

logger = logging.getLogger("edubridge.uploads")

MAX_FILENAME_LENGTH = 200


def validate_upload_filename(filename: str | None) -> str:
    if not filename or len(filename) > MAX_FILENAME_LENGTH:
        raise ValidationError("invalid filename")
    if "/" in filename or "\\" in filename or filename in (".", ".."):
        raise ValidationError("invalid filename path")
    return filename


def sniff_upload_kind(payload: bytes, filename: str, content_type: str | None) -> str:
    """Classify an upload as `pdf`, `image` or `other`."""
    if payload[:4] == b"%PDF" or filename.lower().endswith(".pdf") or content_type == "application/pdf":
        return "pdf"
    try:
        Image.open(io.BytesIO(payload)).verify()
        return "image"
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return "other"


class UploadStore:
    """Writes uploads into one directory under collision-resistant names.

    Names are `<ms-timestamp>-<original name>`; the timestamp never repeats
    within the process, so two uploads in the same millisecond still get
    distinct names.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._last_ms = 0

    def _next_timestamp(self) -> int:
        with self._lock:
            now = int(time.time() * 1000)
            if now <= self._last_ms:
                now = self._last_ms + 1
            self._last_ms = now
            return now

    def unique_name(self, original: str) -> str:
        return f"{self._next_timestamp()}-{original}"

    def save(self, name: str, payload: bytes) -> Path:
        """Write `payload` to `<directory>/<name>` and return the path."""
        path = self.directory / name
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(payload)
        except OSError as e:
            logger.exception("failed to write upload %s", path)
            raise StorageError(f"failed to store file: {e.strerror or e}")
        return path

    def discard(self, path: str | Path) -> None:
        """Remove a stored file, logging (not raising) if it cannot be removed."""
        try:
            Path(path).unlink(missing_ok=True)
        except OSError:
            logger.warning("could not remove orphaned upload %s", path, exc_info=True)
