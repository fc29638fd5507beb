# src/datafix/domains/tickets/api/submit.py
"""
Ticket Submission API Route

Multipart form: ticket fields, the wrong/correct line tables as JSON arrays,
and one or more screenshots.
"""

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ....api.deps import get_current_session
from ....api.responses import success_response
from ....auth.session import UserSession
from ....core.errors import ValidationError
from ....core.models import AttachmentUpload
from ..services.submission_service import DetailLineInput, TicketForm, TicketSubmissionService

logger = logging.getLogger(__name__)

router = APIRouter()


def parse_lines(raw: str, field: str) -> List[DetailLineInput]:
    """Parse a JSON array of ``{item_name, value}`` objects."""
    try:
        rows = json.loads(raw or "[]")
    except json.JSONDecodeError:
        raise ValidationError.for_field(field, "Must be a JSON array", "invalid")
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise ValidationError.for_field(field, "Must be a JSON array of objects", "invalid")
    return [
        DetailLineInput(item_name=str(r.get("item_name") or ""), value=str(r.get("value") or ""))
        for r in rows
    ]


@router.post("")
async def create_ticket(
    wrong_input_date: str = Form(""),
    issue_type: str = Form(""),
    branch_id: str = Form(""),
    feature_id: str = Form(""),
    feature_other: str = Form(""),
    inputter_name: str = Form(""),
    description: str = Form(""),
    priority: int = Form(2),
    wrong_lines: str = Form("[]"),
    correct_lines: str = Form("[]"),
    screenshots: Optional[List[UploadFile]] = File(None),
    session: UserSession = Depends(get_current_session),
):
    """Submit a new data-correction ticket."""
    form = TicketForm(
        wrong_input_date=wrong_input_date,
        issue_type=issue_type,
        branch_id=branch_id,
        feature_id=feature_id,
        feature_other=feature_other,
        inputter_name=inputter_name,
        description=description,
        priority=priority,
        wrong_lines=parse_lines(wrong_lines, "wrong_lines"),
        correct_lines=parse_lines(correct_lines, "correct_lines"),
    )

    uploads = []
    for f in screenshots or []:
        uploads.append(AttachmentUpload(
            filename=f.filename or "screenshot",
            content=await f.read(),
            content_type=f.content_type or "application/octet-stream",
        ))

    service = TicketSubmissionService(session)
    result = await run_in_threadpool(service.submit, form, uploads)
    return JSONResponse(success_response(result.to_dict()), status_code=201)
