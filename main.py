"""
YGO ranking API entry point
"""
import uvicorn
from loguru import logger

from app.config import get_settings
from app.logging_config import setup_logging


def main():
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)

    logger.info(f"Starting API on {settings.APP_HOST}:{settings.APP_PORT}")
    uvicorn.run(
        "app.server:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
