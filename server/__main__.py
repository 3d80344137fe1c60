"""Run the API with uvicorn: ``python -m server``.

The app is only built here, after configuration is read. To serve it with the
uvicorn CLI instead use ``uvicorn --factory server.api:create_app``.
"""

import logging

import uvicorn

from config.settings import AppConfig
from observability.logging import setup_logging

from .api import create_app


def main() -> None:
    config = AppConfig.from_env()
    setup_logging(level=config.log_level, log_file=config.log_file, use_json=config.log_json)

    logger = logging.getLogger("server")
    host, port = config.bind
    logger.info(f"Starting Linux Command Library API server on http://{host}:{port}")
    logger.info(f"CORS enabled: {config.enable_cors}")

    uvicorn.run(create_app(config), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
