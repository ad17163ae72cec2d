"""Main entry point for the favourites REST service."""

import asyncio
import datetime
import json
import logging
import sys

import uvicorn

from .app import create_app
from .config import ServiceConfig
from .errors import ConfigurationError


class StructuredFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def setup_logging(config: ServiceConfig):
    """Setup logging configuration."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if config.structured_logging:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    logging.basicConfig(level=level, handlers=[handler], force=True)


async def run(argv=None) -> int:
    """Load configuration and serve the API until shutdown."""
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else None

    try:
        config = ServiceConfig.load(config_path)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config)
    logger = logging.getLogger(__name__)

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    try:
        app = create_app(config.to_dict())
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    logger.info(f"Starting favourites REST API on {config.host}:{config.port}")

    server = uvicorn.Server(
        uvicorn.Config(app, host=config.host, port=config.port, log_level="info", access_log=True)
    )
    await server.serve()

    logger.info("Favourites REST API stopped")
    return 0


def main():
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
