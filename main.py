#!/usr/bin/env python3
"""
Agenda scraper - appointment booking data over HTTP.

Main entry point for the application.
"""

import argparse
import asyncio
import sys

from loguru import logger
from pydantic import ValidationError

from agenda_scraper.core.config.settings import get_settings
from agenda_scraper.core.exceptions import ConfigurationError
from agenda_scraper.core.logger import setup_structured_logging


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Philaxmed multi-agenda scraping API")
    parser.add_argument("--host", help="Bind address (overrides HOST)")
    parser.add_argument("--port", type=int, help="Port (overrides PORT)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides LOG_LEVEL)",
    )
    return parser.parse_args(argv)


async def run_server(host: str, port: int, log_level: str) -> None:
    """Serve the FastAPI app with uvicorn until interrupted."""
    import uvicorn

    from web.app import create_app

    config_uvicorn = uvicorn.Config(
        create_app(), host=host, port=port, log_level=log_level.lower(), log_config=None
    )
    server = uvicorn.Server(config_uvicorn)
    await server.serve()


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        # Logging is not configured yet
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    log_level = args.log_level or settings.log_level
    setup_structured_logging(
        level=log_level,
        json_format=settings.log_json,
        log_dir=settings.log_dir,
        diagnose=settings.is_development(),
    )

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info(f"🚀 Agenda scraper listening on http://{host}:{port}")

    try:
        asyncio.run(run_server(host, port, log_level))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
