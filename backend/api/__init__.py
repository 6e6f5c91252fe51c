"""
Verity API Module
=================
FastAPI routers for the Verity API.
"""

from api.analyze import router as analyze_router
from api.redact import router as redact_router
from api.templates import router as templates_router

__all__ = ["analyze_router", "templates_router", "redact_router"]
