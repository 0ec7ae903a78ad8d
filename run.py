#!/usr/bin/env python3
"""
Run the GTA Equity Engine web server.
"""

import logging

import uvicorn

from utils.config import Config, configure_logging


logger = logging.getLogger(__name__)


def main():
    """Start the web server."""
    config = Config.load()
    configure_logging(config)

    logger.info("Starting GTA Equity Engine on http://%s:%s", config.host, config.port)
    print("Press Ctrl+C to stop")

    uvicorn.run(
        "web.app:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
