"""HTTP trigger for the daily run verdict."""

import hmac

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.responses import JSONResponse

from .config import settings
from .data_sources import build_data_source
from .domain import RunResult
from .errors import RunVerdictError
from .runner import run_verdict
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="api")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """
    Validate the X-API-Key header against the configured key.

    With no key configured every request is allowed (dev/default mode).
    """
    if not settings.api_key:
        logger.debug("No API key configured; allowing request")
        return

    if not x_api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if not hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        logger.debug("Invalid API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter()
DATA_SOURCE = build_data_source(settings)


def _run(dry_run: bool):
    try:
        return run_verdict(settings, data_source=DATA_SOURCE, dry_run=dry_run)
    except RunVerdictError as exc:
        logger.error("Run failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=RunResult.failure(exc).model_dump(mode="json"),
        )


@router.get("/run-verdict", response_model=RunResult, dependencies=[Depends(require_api_key)])
def trigger_run_get(dry_run: bool = False):
    """Run the verdict (GET, for schedulers that can only issue GETs)."""
    return _run(dry_run)


@router.post("/run-verdict", response_model=RunResult, dependencies=[Depends(require_api_key)])
def trigger_run(dry_run: bool = False):
    """Run the verdict and push it to ntfy."""
    return _run(dry_run)


@router.get("/healthz")
def healthz():
    """Liveness probe; never touches upstream services."""
    return {"ok": True}
