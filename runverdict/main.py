"""FastAPI application for the morning run verdict."""

from fastapi import FastAPI

from utils.logging_utils import setup_logging

from .api import router as api_router
from .config import settings

setup_logging(level=settings.log_level, job_name="run_verdict_http")

app = FastAPI(title="Morning Run Verdict")

app.include_router(api_router, prefix="/v1")
