"""
PDF payload storage.

Routers never touch compressed bytes directly. They ask a PayloadStore to
``pack`` raw bytes into the column values to persist on a study guide, and to
``open`` a stored guide back into something servable. InlinePayloadStore keeps
gzip bytes in the study guide row and still serves rows created before inline
storage existed, which point at a file on disk.
"""

import gzip
import logging
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import DEFAULT_COMPRESSION_LEVEL
from .db_models import DBStudyGuide
from .exceptions import PayloadCorruptError, PayloadMissingError, PayloadUnavailableError
from .models import StorageMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompressedPayload:
    data: bytes
    original_size: int
    compressed_size: int

    @property
    def ratio(self) -> float:
        """Compressed size as a fraction of the original (0 for empty input)."""
        if not self.original_size:
            return 0.0
        return self.compressed_size / self.original_size


@dataclass(frozen=True)
class PdfPayload:
    """Servable PDF: either bytes in memory or a path on disk."""
    content: Optional[bytes] = None
    path: Optional[Path] = None


def compress_payload(raw: bytes, level: int = DEFAULT_COMPRESSION_LEVEL) -> CompressedPayload:
    data = gzip.compress(raw, compresslevel=level)
    return CompressedPayload(data=data, original_size=len(raw), compressed_size=len(data))


def decompress_payload(data: bytes) -> bytes:
    """
    Inflate gzip bytes.

    Raises:
        PayloadCorruptError: if the bytes are not a complete gzip stream
    """
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        logger.error(f"Stored PDF payload failed to decompress: {e}")
        raise PayloadCorruptError() from e


def storage_mode(guide: DBStudyGuide) -> StorageMode:
    """Classify a study guide without loading its payload."""
    if guide.compressed_size is not None:
        return StorageMode.INLINE
    if guide.file_path:
        return StorageMode.LEGACY_FILE
    return StorageMode.MISSING


class PayloadStore(ABC):
    """Narrow interface between study guide records and their PDF bytes."""

    @abstractmethod
    def pack(self, raw: bytes) -> Dict[str, Any]:
        """Return the study guide column values that persist ``raw``."""

    @abstractmethod
    def open(self, guide: DBStudyGuide) -> PdfPayload:
        """Return the guide's PDF, or raise a PayloadError."""


class InlinePayloadStore(PayloadStore):
    """gzip bytes inline in the row, with a read-only fallback to legacy files."""

    def __init__(self, compression_level: int = DEFAULT_COMPRESSION_LEVEL, legacy_root: Optional[Path] = None):
        self.compression_level = compression_level
        self.legacy_root = Path(legacy_root) if legacy_root else None

    def pack(self, raw: bytes) -> Dict[str, Any]:
        payload = compress_payload(raw, self.compression_level)
        logger.info(
            f"Compressed PDF {payload.original_size} -> {payload.compressed_size} bytes "
            f"({payload.ratio:.0%} of original)"
        )
        return {
            "compressed_data": payload.data,
            "original_size": payload.original_size,
            "compressed_size": payload.compressed_size,
            "file_path": None,
        }

    def resolve_legacy_path(self, file_path: str) -> Path:
        """Stored paths are relative to the old working directory; fall back to legacy_root."""
        path = Path(file_path)
        if not path.exists() and not path.is_absolute() and self.legacy_root is not None:
            candidate = self.legacy_root / path.name
            if candidate.exists():
                return candidate
        return path

    def open(self, guide: DBStudyGuide) -> PdfPayload:
        if guide.compressed_data is not None:
            return PdfPayload(content=decompress_payload(guide.compressed_data))

        if guide.file_path:
            path = self.resolve_legacy_path(guide.file_path)
            if not path.is_file():
                logger.warning(f"Legacy PDF missing on disk for study guide {guide.id}: {path}")
                raise PayloadMissingError()
            return PdfPayload(path=path)

        raise PayloadUnavailableError()
