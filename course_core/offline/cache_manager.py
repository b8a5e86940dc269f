# =============================================================================
# course_core/offline/cache_manager.py
# Cache Manager for staged uploads and the HTTP response cache
# =============================================================================
"""
CacheManager - Owns the on-disk cache directory.

Features:
- Materializes a picked image (bytes, file-like upload or path) into a
  temporary file suitable for a multipart transfer
- Cleanup of staged files once an upload finished, and of files left
  behind by interrupted uploads (swept when the data service starts)
- Location of the HTTP response cache used by requests-cache
"""

from __future__ import annotations
import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

from course_core.errors import LocalResourceError

logger = logging.getLogger(__name__)

# Anything the UI can hand over as a picked image
ImageSource = Union[bytes, bytearray, str, Path, Any]


class CacheManager:
    """
    Manages the local cache directory.

    Directory Structure:
    -------------------
    local_data/cache/
    ├── images/            # Staged image uploads (img_*.jpg)
    └── http_cache.sqlite  # requests-cache response store
    """

    DEFAULT_CACHE_DIR = Path(
        os.getenv("COURSES_CACHE_DIR", Path(__file__).parent.parent.parent / "local_data" / "cache")
    )
    HTTP_CACHE_NAME = "http_cache"
    IMAGE_PREFIX = "img_"
    CHUNK_SIZE = 4 * 1024

    # Staged images older than this are removed by cleanup_expired()
    STAGED_IMAGE_EXPIRY = timedelta(days=1)

    _instance: Optional[CacheManager] = None

    def __init__(self, cache_dir: Optional[Path] = None):
        """
        Initialize cache manager.

        Args:
            cache_dir: Base directory for cache storage
        """
        self.cache_dir = Path(cache_dir) if cache_dir else self.DEFAULT_CACHE_DIR
        self._ensure_directories()

    @classmethod
    def get_instance(cls, cache_dir: Optional[Path] = None) -> CacheManager:
        """Get or create singleton instance."""
        if cls._instance is None:
            cls._instance = CacheManager(cache_dir)
        return cls._instance

    @property
    def images_dir(self) -> Path:
        return self.cache_dir / "images"

    @property
    def http_cache_path(self) -> Path:
        """Path handed to requests-cache (it appends .sqlite)."""
        return self.cache_dir / self.HTTP_CACHE_NAME

    def _ensure_directories(self) -> None:
        """Create cache directory structure."""
        self.images_dir.mkdir(parents=True, exist_ok=True)

    # =========================================================================
    # IMAGE STAGING
    # =========================================================================

    def stage_image(self, image: ImageSource, suffix: Optional[str] = None) -> Path:
        """
        Copy a picked image into a temporary file.

        Args:
            image: Raw bytes, a path, or a file-like object (e.g. a Streamlit
                UploadedFile) exposing getvalue() or read()
            suffix: File extension; derived from the source name when omitted

        Returns:
            Path of the staged file

        Raises:
            LocalResourceError: the image could not be materialized
        """
        if image is None:
            raise LocalResourceError(resource="image")

        suffix = suffix or self._suffix_for(image)
        fd, temp_name = tempfile.mkstemp(prefix=self.IMAGE_PREFIX, suffix=suffix, dir=self.images_dir)
        staged = Path(temp_name)

        try:
            with os.fdopen(fd, "wb") as output:
                written = self._copy_into(image, output)
        except (OSError, TypeError, ValueError) as e:
            staged.unlink(missing_ok=True)
            logger.error(f"Error creating temp file for image: {e}")
            raise LocalResourceError(resource=str(getattr(image, "name", "image"))) from e

        if written == 0:
            staged.unlink(missing_ok=True)
            logger.error("Error: picked image is empty")
            raise LocalResourceError(resource=str(getattr(image, "name", "image")))

        logger.debug(f"Staged image at {staged} ({written} bytes)")
        return staged

    def _suffix_for(self, image: ImageSource) -> str:
        name = image if isinstance(image, (str, Path)) else getattr(image, "name", None)
        if name:
            suffix = Path(str(name)).suffix
            if suffix:
                return suffix.lower()
        return ".jpg"

    def _copy_into(self, image: ImageSource, output) -> int:
        if isinstance(image, (bytes, bytearray)):
            output.write(image)
            return len(image)

        if isinstance(image, (str, Path)):
            with open(image, "rb") as source:
                return self._copy_stream(source, output)

        if hasattr(image, "getvalue"):
            data = image.getvalue()
            output.write(data)
            return len(data)

        if hasattr(image, "read"):
            return self._copy_stream(image, output)

        raise TypeError(f"Unsupported image source: {type(image).__name__}")

    def _copy_stream(self, source, output) -> int:
        written = 0
        for chunk in iter(lambda: source.read(self.CHUNK_SIZE), b""):
            output.write(chunk)
            written += len(chunk)
        return written

    def release(self, staged: Optional[Path]) -> None:
        """Remove a staged file once its upload finished."""
        if staged is None:
            return
        try:
            Path(staged).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove staged image {staged}: {e}")

    # =========================================================================
    # CACHE MANAGEMENT
    # =========================================================================

    def get_cache_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        staged = list(self.images_dir.glob(f"{self.IMAGE_PREFIX}*"))
        http_file = self.http_cache_path.with_suffix(".sqlite")
        return {
            "staged_images": len(staged),
            "staged_bytes": sum(p.stat().st_size for p in staged),
            "http_cache_bytes": http_file.stat().st_size if http_file.exists() else 0,
        }

    def cleanup_expired(self) -> int:
        """
        Remove staged images left behind by interrupted uploads.

        Returns:
            Number of files removed
        """
        removed = 0
        cutoff = datetime.now() - self.STAGED_IMAGE_EXPIRY
        for path in self.images_dir.glob(f"{self.IMAGE_PREFIX}*"):
            if datetime.fromtimestamp(path.stat().st_mtime) < cutoff:
                self.release(path)
                removed += 1
        return removed


# Singleton accessor
_cache_manager: Optional[CacheManager] = None


def get_cache_manager() -> CacheManager:
    """Get the global CacheManager instance."""
    global _cache_manager
    if _cache_manager is None:
        _cache_manager = CacheManager.get_instance()
    return _cache_manager
