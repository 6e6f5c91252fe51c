"""
Verity Analyze API
==================
Runs the analysis pipeline on an uploaded document or on plain text.
"""

import asyncio
import logging
from datetime import datetime
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from schemas import (
    AnalysisResponse,
    ErrorResponse,
    ProvenanceSchema,
    TextAnalyzeRequest,
)
from verity import ContractAnalyzer, DocumentError, get_settings
from verity.extractors import ACCEPTED_FILE_TYPES
from verity.scripts import ScriptCode, parse_script

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/analyze", tags=["Analyze"])

CHUNK_SIZE = 1024 * 1024  # 1MB

# DocumentError.reason -> HTTP status
DOCUMENT_ERROR_STATUS = {
    "unsupported_format": status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    "corrupt": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "encrypted": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "unreadable": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "low_confidence": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "timeout": status.HTTP_504_GATEWAY_TIMEOUT,
    "ocr_failed": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@lru_cache
def get_analyzer() -> ContractAnalyzer:
    """Shared analyzer; holds only immutable configuration."""
    return ContractAnalyzer(get_settings())


def document_error_to_http(exc: DocumentError) -> HTTPException:
    """Convert a core document failure to an HTTP error."""
    return HTTPException(
        status_code=DOCUMENT_ERROR_STATUS.get(exc.reason, status.HTTP_422_UNPROCESSABLE_ENTITY),
        detail={
            "error": type(exc).__name__,
            "message": exc.message,
            "reason": exc.reason,
            "details": None,
        },
    )


def parse_script_field(value: str | None) -> ScriptCode:
    try:
        return parse_script(value)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error": "InvalidScript",
                "message": str(e),
                "reason": None,
                "details": {"received": value},
            },
        ) from None


async def read_upload(file: UploadFile) -> bytes:
    """
    Read an uploaded file into memory, enforcing the size limit.

    Raises:
        HTTPException: If the file is empty or too large
    """
    settings = get_settings()
    chunks: list[bytes] = []
    file_size = 0

    while chunk := await file.read(CHUNK_SIZE):
        file_size += len(chunk)
        if file_size > settings.max_file_size_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail={
                    "error": "FileTooLarge",
                    "message": f"File exceeds maximum size of {settings.max_file_size_mb}MB.",
                    "reason": None,
                    "details": {
                        "max_size_mb": settings.max_file_size_mb,
                        "received_bytes": file_size,
                    },
                },
            )
        chunks.append(chunk)

    if file_size == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "EmptyFile",
                "message": "The uploaded file is empty.",
                "reason": None,
                "details": {"filename": file.filename},
            },
        )
    return b"".join(chunks)


@router.post(
    "",
    response_model=AnalysisResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Empty upload"},
        413: {"model": ErrorResponse, "description": "File too large"},
        415: {"model": ErrorResponse, "description": "Unsupported file type"},
        422: {"model": ErrorResponse, "description": "Corrupt, encrypted or unreadable document"},
        504: {"model": ErrorResponse, "description": "Extraction or OCR timed out"},
    },
    summary="Analyze an uploaded contract",
    description=f"""
    Upload a contract and analyze it in one step.

    The document is normalized to plain text (falling back to OCR for
    scanned or badly encoded files), checked against the violation
    catalog, scored, and compared with a fair template.

    **Accepted file types:** {ACCEPTED_FILE_TYPES}
    """,
)
async def analyze_document(
    file: Annotated[UploadFile, File(description="Contract to analyze")],
    script: Annotated[str, Form(description="Script code or 'auto'")] = "auto",
    template: Annotated[str | None, Form(description="Fair template name")] = None,
    force_ocr: Annotated[bool, Form(description="Always run OCR")] = False,
    analyzer: ContractAnalyzer = Depends(get_analyzer),
) -> AnalysisResponse:
    logger.info(f"Received analysis request: {file.filename}")

    script_code = parse_script_field(script)
    content = await read_upload(file)

    try:
        document, result = await analyzer.analyze_document(
            content,
            filename=file.filename,
            content_type=file.content_type,
            script=script_code,
            template=template,
            force_ocr=force_ocr,
        )
    except DocumentError as e:
        logger.warning(f"Document rejected ({e.reason}): {e.message}")
        raise document_error_to_http(e) from e

    return AnalysisResponse(
        **result.to_dict(),
        provenance=ProvenanceSchema(**document.provenance()),
        filename=file.filename,
        analyzed_at=datetime.utcnow(),
    )


@router.post(
    "/text",
    response_model=AnalysisResponse,
    summary="Analyze contract text",
    description="Analyze plain contract text, optionally merging findings from an external layer.",
)
async def analyze_text(
    request: TextAnalyzeRequest,
    analyzer: ContractAnalyzer = Depends(get_analyzer),
) -> AnalysisResponse:
    script_code = parse_script_field(request.script)
    external = (
        [f.model_dump(mode="json", exclude_none=True) for f in request.external_findings]
        if request.external_findings
        else None
    )

    # Clause lookup is CPU-bound; keep it off the event loop
    result = await asyncio.to_thread(
        analyzer.analyze_text,
        request.text,
        script=None if script_code == ScriptCode.AUTO else script_code,
        template=request.template,
        external_findings=external,
    )
    return AnalysisResponse(**result.to_dict(), analyzed_at=datetime.utcnow())
