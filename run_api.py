#!/usr/bin/env python3
"""
Script to run the Book Records API server.
"""

import uvicorn

from books_api.config import config as api_config
from utilities.config import config
from utilities.logger import get_logger, setup_logging


def main():
    """Run the API server."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )

    logger = get_logger(__name__)
    logger.info(
        "Starting Book Records API server",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.reload,
        database=config.mongodb_database,
        collection=config.mongodb_collection
    )

    uvicorn.run(
        "books_api.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.reload,
        log_level=config.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    main()
