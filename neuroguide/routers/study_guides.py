"""
Study Guides Router.

Endpoints:
- GET    /study-guides                 - List metadata (never bytes)
- POST   /study-guides                 - Create from base64 JSON
- POST   /study-guides/upload          - Create from multipart upload (field "pdf")
- GET    /study-guides/storage-status  - Where each guide's PDF lives
- POST   /study-guides/migrate         - Move legacy on-disk PDFs inline
- GET    /study-guides/{id}            - Metadata
- PUT    /study-guides/{id}            - Update metadata
- DELETE /study-guides/{id}            - Delete
- GET    /study-guides/{id}/file       - Serve the PDF inline
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse
from pydantic import ValidationError

from ..auth import TokenIdentity
from ..blob_storage import InlinePayloadStore
from ..constants import PDF_MIME_TYPE
from ..dependencies import (
    get_current_user,
    get_payload_store,
    get_study_guide_repository,
    get_topic_repository,
)
from ..exceptions import NeuroGuideError, NotFoundError, RequestDataError, UploadFailedError
from ..models import (
    MessageResponse,
    MigrationReport,
    StorageStatusReport,
    StudyGuideCreate,
    StudyGuideResponse,
    StudyGuideUpdate,
    StudyGuideUploadForm,
)
from ..repository import StudyGuideRepository, TopicRepository
from ..sanitization import content_disposition
from ..study_guide_service import (
    migrate_legacy_study_guides,
    read_pdf_upload,
    single_pdf_upload,
    storage_status,
    store_study_guide,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/study-guides", tags=["study-guides"])


@router.get("", response_model=List[StudyGuideResponse])
def list_study_guides(
    current_user: TokenIdentity = Depends(get_current_user),
    guides: StudyGuideRepository = Depends(get_study_guide_repository),
):
    """All of the caller's study guides, most recently uploaded first."""
    return [StudyGuideResponse.model_validate(g) for g in guides.list(current_user.user_id)]


@router.post("", response_model=StudyGuideResponse, status_code=status.HTTP_201_CREATED)
async def create_study_guide(
    guide_data: StudyGuideCreate,
    current_user: TokenIdentity = Depends(get_current_user),
    guides: StudyGuideRepository = Depends(get_study_guide_repository),
    topics: TopicRepository = Depends(get_topic_repository),
    payload_store: InlinePayloadStore = Depends(get_payload_store),
):
    """Create a study guide from a base64-encoded PDF in the JSON body."""
    topics.ensure_owned(current_user.user_id, guide_data.topic_id)

    try:
        guide = await store_study_guide(
            guides,
            payload_store,
            current_user.user_id,
            title=guide_data.title,
            file_name=guide_data.file_name,
            raw=guide_data.decoded_content(),
            topic_id=guide_data.topic_id,
            total_pages=guide_data.total_pages,
            current_page=guide_data.current_page,
        )
    except NeuroGuideError:
        raise
    except Exception as e:
        logger.error(f"Study guide creation failed for user {current_user.user_id}: {e}", exc_info=True)
        raise UploadFailedError()

    return StudyGuideResponse.model_validate(guide)


@router.post("/upload", response_model=StudyGuideResponse, status_code=status.HTTP_201_CREATED)
async def upload_study_guide(
    request: Request,
    title: Optional[str] = Form(None),
    topic_id: Optional[str] = Form(None, alias="topicId"),
    total_pages: Optional[str] = Form(None, alias="totalPages"),
    current_user: TokenIdentity = Depends(get_current_user),
    guides: StudyGuideRepository = Depends(get_study_guide_repository),
    topics: TopicRepository = Depends(get_topic_repository),
    payload_store: InlinePayloadStore = Depends(get_payload_store),
):
    """
    Upload a PDF (multipart field ``pdf``) as a new study guide.

    Checks run in order: exactly one file, PDF MIME type, 50MB ceiling,
    then the title/topic form fields.
    """
    form = await request.form()
    upload = single_pdf_upload(form)

    try:
        raw = await read_pdf_upload(upload)

        try:
            fields = StudyGuideUploadForm(title=title, topic_id=topic_id, total_pages=total_pages)
        except ValidationError as e:
            raise RequestDataError.from_validation_errors(e.errors())
        topics.ensure_owned(current_user.user_id, fields.topic_id)

        guide = await store_study_guide(
            guides,
            payload_store,
            current_user.user_id,
            title=fields.title,
            file_name=upload.filename,
            raw=raw,
            topic_id=fields.topic_id,
            total_pages=fields.total_pages,
        )
    except NeuroGuideError:
        raise
    except Exception as e:
        logger.error(f"Upload failed for user {current_user.user_id}: {e}", exc_info=True)
        raise UploadFailedError()

    return StudyGuideResponse.model_validate(guide)


@router.get("/storage-status", response_model=StorageStatusReport)
def get_storage_status(
    current_user: TokenIdentity = Depends(get_current_user),
    guides: StudyGuideRepository = Depends(get_study_guide_repository),
):
    return storage_status(guides, current_user.user_id)


@router.post("/migrate", response_model=MigrationReport, response_model_exclude_none=True)
def migrate_study_guides(
    current_user: TokenIdentity = Depends(get_current_user),
    guides: StudyGuideRepository = Depends(get_study_guide_repository),
    payload_store: InlinePayloadStore = Depends(get_payload_store),
):
    """Convert the caller's on-disk study guides to inline compressed storage."""
    outcome = migrate_legacy_study_guides(guides, payload_store, user_id=current_user.user_id)
    return MigrationReport(
        message=outcome.message,
        migrated_count=outcome.migrated,
        errors=outcome.errors or None,
    )


@router.get("/{guide_id}", response_model=StudyGuideResponse)
def get_study_guide(
    guide_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    guides: StudyGuideRepository = Depends(get_study_guide_repository),
):
    guide = guides.get(current_user.user_id, guide_id)
    if guide is None:
        raise NotFoundError("Study guide")
    return StudyGuideResponse.model_validate(guide)


@router.put("/{guide_id}", response_model=StudyGuideResponse)
def update_study_guide(
    guide_id: str,
    guide_update: StudyGuideUpdate,
    current_user: TokenIdentity = Depends(get_current_user),
    guides: StudyGuideRepository = Depends(get_study_guide_repository),
    topics: TopicRepository = Depends(get_topic_repository),
):
    """Update title, topic or page tracking. The PDF itself cannot be replaced."""
    if guides.get(current_user.user_id, guide_id) is None:
        raise NotFoundError("Study guide")

    changes = guide_update.model_dump(exclude_unset=True)
    topics.ensure_owned(current_user.user_id, changes.get("topic_id"))

    guide = guides.update(current_user.user_id, guide_id, changes)
    return StudyGuideResponse.model_validate(guide)


@router.delete("/{guide_id}", response_model=MessageResponse)
def delete_study_guide(
    guide_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    guides: StudyGuideRepository = Depends(get_study_guide_repository),
):
    if not guides.delete(current_user.user_id, guide_id):
        raise NotFoundError("Study guide")
    return MessageResponse(message="Study guide deleted successfully")


@router.get("/{guide_id}/file")
async def get_study_guide_file(
    guide_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    guides: StudyGuideRepository = Depends(get_study_guide_repository),
    payload_store: InlinePayloadStore = Depends(get_payload_store),
):
    """
    Serve the PDF for inline viewing.

    Inline compressed bytes are preferred; legacy records stream from disk.
    """
    guide = guides.get(current_user.user_id, guide_id)
    if guide is None:
        raise NotFoundError("Study guide")

    payload = await run_in_threadpool(payload_store.open, guide)
    headers = {"Content-Disposition": content_disposition(guide.file_name)}

    if payload.path is not None:
        return FileResponse(payload.path, media_type=PDF_MIME_TYPE, headers=headers)
    return Response(content=payload.content, media_type=PDF_MIME_TYPE, headers=headers)
