"""
Verity Templates API
====================
Lists the fair templates used for deviation checks.
"""

from fastapi import APIRouter

from schemas import TemplateSchema, TemplatesResponse
from verity.deviations import DEFAULT_TEMPLATE, FAIR_TEMPLATES

router = APIRouter(prefix="/templates", tags=["Templates"])


@router.get(
    "",
    response_model=TemplatesResponse,
    summary="List fair templates",
    description="Names and thresholds of every fair template, plus the default.",
)
async def list_templates() -> TemplatesResponse:
    return TemplatesResponse(
        default=DEFAULT_TEMPLATE,
        templates=[
            TemplateSchema(
                name=template.name,
                label=template.label,
                terms={
                    term.value: {
                        "fair": thresholds.fair,
                        "warning": thresholds.warning,
                        "critical": thresholds.critical,
                    }
                    for term, thresholds in template.terms.items()
                },
            )
            for template in FAIR_TEMPLATES.values()
        ],
    )
