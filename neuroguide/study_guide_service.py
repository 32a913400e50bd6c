"""
Study guide upload, storage and migration.

Upload flow:
    1. exactly one file, sent in the ``pdf`` field
    2. MIME type must be application/pdf (checked before size)
    3. bounded read: at most MAX_UPLOAD_SIZE_BYTES + 1 bytes are pulled into memory
    4. compression runs in the threadpool, before the response is sent
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile

from .blob_storage import InlinePayloadStore, PayloadStore, storage_mode
from .constants import MAX_UPLOAD_SIZE_BYTES, PDF_MIME_TYPE, UPLOAD_FIELD_NAME
from .db_models import DBStudyGuide
from .exceptions import (
    FileTooLargeError,
    MissingFileError,
    RequestDataError,
    TooManyFilesError,
    UnsupportedFileTypeError,
)
from .models import StorageMode, StorageStatusEntry, StorageStatusReport
from .repository import StudyGuideRepository
from .sanitization import sanitize_filename

logger = logging.getLogger(__name__)


# =============================================================================
# Upload validation
# =============================================================================

def single_pdf_upload(form: FormData) -> UploadFile:
    """
    Pick the one uploaded file out of a multipart form.

    Raises:
        MissingFileError: no file part at all
        TooManyFilesError: more than one file part
        RequestDataError: the file was sent under another field name
    """
    files = [(key, value) for key, value in form.multi_items() if isinstance(value, UploadFile)]
    if not files:
        raise MissingFileError()
    if len(files) > 1:
        raise TooManyFilesError()

    field_name, upload = files[0]
    if field_name != UPLOAD_FIELD_NAME:
        raise RequestDataError.for_field(field_name, f"PDF must be sent in the '{UPLOAD_FIELD_NAME}' field")
    return upload


def check_pdf_content_type(content_type: Optional[str]) -> None:
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if mime != PDF_MIME_TYPE:
        raise UnsupportedFileTypeError(mime or None)


def check_pdf_size(size: int, max_size: int = MAX_UPLOAD_SIZE_BYTES) -> None:
    if size > max_size:
        raise FileTooLargeError(size=size, max_size=max_size)


async def read_pdf_upload(upload: UploadFile, max_size: int = MAX_UPLOAD_SIZE_BYTES) -> bytes:
    """Validate type, then read at most ``max_size + 1`` bytes and enforce the ceiling."""
    check_pdf_content_type(upload.content_type)
    data = await upload.read(max_size + 1)
    check_pdf_size(len(data), max_size)
    return data


# =============================================================================
# Persistence
# =============================================================================

async def store_study_guide(
    guides: StudyGuideRepository,
    payload_store: PayloadStore,
    user_id: str,
    *,
    title: str,
    file_name: Optional[str],
    raw: bytes,
    topic_id: Optional[str] = None,
    total_pages: Optional[int] = None,
    current_page: int = 1,
) -> DBStudyGuide:
    """Compress ``raw`` and persist a new study guide owned by ``user_id``."""
    check_pdf_size(len(raw))
    stored_fields = await run_in_threadpool(payload_store.pack, raw)

    guide = guides.create(user_id, {
        "title": title,
        "file_name": sanitize_filename(file_name),
        "topic_id": topic_id,
        "total_pages": total_pages,
        "current_page": current_page,
        **stored_fields,
    })
    logger.info(f"Study guide {guide.id} stored for user {user_id} ({guide.original_size} bytes)")
    return guide


# =============================================================================
# Storage report & legacy migration
# =============================================================================

def storage_status(guides: StudyGuideRepository, user_id: str) -> StorageStatusReport:
    entries = []
    for guide in guides.list(user_id):
        ratio = None
        if guide.original_size and guide.compressed_size is not None:
            ratio = round(guide.compressed_size / guide.original_size, 4)
        entries.append(StorageStatusEntry(
            id=guide.id,
            title=guide.title,
            file_name=guide.file_name,
            storage=storage_mode(guide),
            original_size=guide.original_size,
            compressed_size=guide.compressed_size,
            compression_ratio=ratio,
        ))

    return StorageStatusReport(
        total=len(entries),
        inline=sum(1 for e in entries if e.storage is StorageMode.INLINE),
        legacy_file=sum(1 for e in entries if e.storage is StorageMode.LEGACY_FILE),
        missing=sum(1 for e in entries if e.storage is StorageMode.MISSING),
        guides=entries,
    )


@dataclass
class MigrationOutcome:
    migrated: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Migration completed. {self.migrated} guides migrated."


def migrate_legacy_study_guides(
    guides: StudyGuideRepository,
    payload_store: InlinePayloadStore,
    user_id: Optional[str] = None,
    remove_files: bool = True,
) -> MigrationOutcome:
    """
    Move on-disk PDFs into inline compressed storage.

    Only guides with a file path and no inline payload are touched. A failure
    on one guide is recorded and the rest still run. The old file is removed
    after its guide has been committed.
    """
    outcome = MigrationOutcome()

    for guide in guides.list_legacy(user_id):
        path = payload_store.resolve_legacy_path(guide.file_path)
        if not path.is_file():
            outcome.errors.append(f"File not found for guide {guide.id}: {guide.file_path}")
            continue

        try:
            raw = path.read_bytes()
            guides.update(guide.user_id, guide.id, payload_store.pack(raw))
        except OSError as e:
            logger.error(f"Failed to migrate study guide {guide.id}: {e}")
            outcome.errors.append(f"Failed to migrate guide {guide.id}: {e}")
            continue

        outcome.migrated += 1
        logger.info(f"Migrated study guide {guide.id} from {path}")

        if remove_files:
            try:
                path.unlink()
            except OSError as e:
                logger.warning(f"Migrated guide {guide.id} but could not remove {path}: {e}")

    return outcome


def clean_legacy_upload_dir(
    guides: StudyGuideRepository,
    payload_store: InlinePayloadStore,
    upload_dir: Path,
) -> List[Path]:
    """
    Delete files in the legacy upload directory that no study guide still needs.

    Files referenced by a guide that has not been migrated are kept.
    Returns the removed paths.
    """
    if not upload_dir.is_dir():
        return []

    still_needed = {
        payload_store.resolve_legacy_path(guide.file_path).resolve()
        for guide in guides.list_legacy()
    }

    removed = []
    for path in sorted(upload_dir.iterdir()):
        if not path.is_file() or path.resolve() in still_needed:
            continue
        try:
            path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")
            continue
        removed.append(path)

    logger.info(f"Removed {len(removed)} files from {upload_dir}")
    return removed
