from __future__ import annotations

import structlog
from fastapi import APIRouter, Response

router = APIRouter(prefix="/api", tags=["health"])
logger = structlog.get_logger(__name__)


@router.get("/health")
def health() -> Response:
    logger.debug("health.check")
    return Response(status_code=200)
