"""
Verity Redaction API
====================
Strips personal identifiers from text before it is sent to an external
analysis service.
"""

from fastapi import APIRouter

from schemas import RedactRequest, RedactResponse
from verity.privacy import redact_pii

router = APIRouter(prefix="/redact", tags=["Privacy"])


@router.post(
    "",
    response_model=RedactResponse,
    summary="Redact PII",
    description="Replace PAN, Aadhaar, phone, email and GSTIN values with placeholders.",
)
async def redact_text(request: RedactRequest) -> RedactResponse:
    return RedactResponse(**redact_pii(request.text).to_dict())
