"""
app/api/routers/plan_import.py

Plan import HTTP endpoints: parse for review, commit, and templates.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, UploadFile
from sqlalchemy.orm import Session

from app.api.dependencies import get_plan_upload
from app.repositories.activity_repository import ActivityRepository
from app.schemas.plan_import import (
    CommitRequest,
    CommitSummaryResponse,
    ErrorResponse,
    ImportResultResponse,
)
from app.services.activity_commit_service import (
    ActivityCommitService,
    get_activity_commit_service,
)
from app.services.plan_import_service import PlanImportService, get_plan_import_service
from app.services.template_service import get_plan_template
from db.session import get_db

router = APIRouter(prefix="/plan-import", tags=["plan-import"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post("/parse", response_model=ImportResultResponse, responses=_ERROR_RESPONSES)
def parse_plan_file(
    file: UploadFile = Depends(get_plan_upload),
    import_service: PlanImportService = Depends(get_plan_import_service),
) -> ImportResultResponse:
    """
    Parse and validate one plan file; nothing is persisted.
    """

    try:
        # One byte past the limit is enough for the service to reject the upload.
        content = file.file.read(import_service.max_upload_bytes + 1)
        result = import_service.parse_upload(file_name=file.filename, content=content)
    finally:
        file.file.close()

    return ImportResultResponse.from_domain(result)


@router.post("/commit", response_model=CommitSummaryResponse, responses=_ERROR_RESPONSES)
def commit_activities(
    payload: CommitRequest,
    db: Session = Depends(get_db),
    commit_service: ActivityCommitService = Depends(get_activity_commit_service),
) -> CommitSummaryResponse:
    """
    Persist the valid rows of a reviewed import into one project.
    """

    summary = commit_service.commit(
        store=ActivityRepository(db),
        activities=[activity.to_domain() for activity in payload.activities],
        project_code=payload.project_code,
        created_by=payload.created_by,
    )
    return CommitSummaryResponse.from_domain(summary)


@router.get("/templates/{kind}", responses={404: {"model": ErrorResponse}})
def download_template(kind: str) -> Response:
    template = get_plan_template(kind)
    return Response(
        content=template.content.encode("utf-8"),
        media_type=f"{template.media_type}; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{template.file_name}"'},
    )
