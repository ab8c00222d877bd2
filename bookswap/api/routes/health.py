"""
Health Check Routes

FastAPI endpoints for service health and readiness checks.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from bookswap import __version__
from bookswap.conversations.keys import KEY_PREFIX
from bookswap.conversations.storage import StorageError
from bookswap.models.api import HealthResponse, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    """
    Basic liveness check.

    Returns 200 OK if the service is running.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness() -> JSONResponse:
    """
    Readiness check for service dependencies.

    Checks:
    - Conversation store is initialized
    - Conversation storage is reachable

    Returns:
        200 OK if all checks pass
        503 Service Unavailable if any check fails
    """
    from bookswap.api.main import app_state

    checks: dict[str, bool] = {}

    store = app_state.get("conversation_store")
    checks["conversation_store"] = store is not None
    if store is None:
        logger.warning("Conversation store check: FAILED (not initialized)")

    checks["storage"] = False
    if store is not None and store.storage is not None:
        try:
            store.storage.keys(KEY_PREFIX)
            checks["storage"] = True
            logger.debug("Storage check: OK")
        except StorageError as e:
            logger.warning(f"Storage check: FAILED ({e})")
    else:
        logger.warning("Storage check: FAILED (storage disabled)")

    all_ready = all(checks.values())
    response_data = ReadinessResponse(
        status="ready" if all_ready else "not_ready",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
        checks=checks,
    )

    status_code = status.HTTP_200_OK if all_ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content=response_data.model_dump(),
    )
