import os

import uvicorn

from runverdict.config import settings
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="server")


def warn_on_missing_topic() -> None:
    """Every non-dry run will fail without a topic; say so at startup rather than at 06:10."""
    if not settings.ntfy_topic:
        logger.warning("NTFY_TOPIC is not set; /v1/run-verdict will fail unless called with dry_run=true")


if __name__ == "__main__":
    warn_on_missing_topic()

    uvicorn.run(
        "runverdict.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
