"""
Router for the rule checking endpoint.

Handles:
- PDF upload plus rule list, returning one verdict per rule
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from ..exceptions import CheckRequestError, InternalError
from ..models import CheckResponse, ErrorResponse
from ..services.checker import RuleCheckService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["check"])


def get_rule_check_service(request: Request) -> RuleCheckService:
    """Return the service the application was built with."""
    return request.app.state.rule_check_service


@router.post(
    "/check-pdf",
    response_model=CheckResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def check_pdf(
    service: Annotated[RuleCheckService, Depends(get_rule_check_service)],
    pdf: Annotated[UploadFile | None, File(description="PDF file to check")] = None,
    rules: Annotated[
        str | None, Form(description="JSON array of natural-language rules")
    ] = None,
) -> CheckResponse:
    """
    Check a PDF against up to a handful of natural-language rules.

    Extracts the document text once, asks the model about every rule
    concurrently and returns the verdicts in submission order.
    """
    try:
        # Everything except extraction is decided before the upload is read
        checked_rules = service.validate_request(
            has_file=pdf is not None,
            content_type=pdf.content_type if pdf is not None else None,
            size=pdf.size if pdf is not None else None,
            rules_raw=rules,
        )

        pdf_bytes = await pdf.read()
        service.check_upload_size(len(pdf_bytes))
        logger.info("Checking PDF: %s (%d bytes)", pdf.filename, len(pdf_bytes))

        return await service.process(pdf_bytes, pdf.content_type, checked_rules)

    except CheckRequestError:
        raise
    except Exception:
        logger.exception("Unexpected error checking PDF")
        raise InternalError()
    finally:
        if pdf is not None:
            await pdf.close()
