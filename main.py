#!/usr/bin/env python3
"""HR admin API entry point."""

import logging

from config.settings import settings

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.logging.level, logging.INFO),
    format=settings.logging.format
)
logger = logging.getLogger(__name__)

from src.web_interface import create_app  # noqa: E402

app = create_app()


if __name__ == '__main__':
    logger.info(f"Starting HR admin API on {settings.web.host}:{settings.web.port}")
    app.run(
        host=settings.web.host,
        port=settings.web.port,
        debug=settings.web.debug and not settings.web.is_production
    )
