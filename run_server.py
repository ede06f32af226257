import os

import uvicorn

from weatherapp.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def check_configuration() -> None:
    """Warn early when the provider key is missing; requests would fail with 503."""
    if not settings.openweather_api_key:
        logger.warning("WEATHERAPP_OPENWEATHER_API_KEY is not set; /v1/weather will answer 503.")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="weatherapp-api")
    check_configuration()

    uvicorn.run(
        "weatherapp.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
