"""
Main module for the signup assistant gateway.
"""

from __future__ import annotations

import asyncio
import logging

import uvicorn

from educore_assistant.config import Configuration
from educore_assistant.gateway import create_app


def configure_logging(config: Configuration) -> None:
    level = config.get_logging_config().get("level", "INFO")
    logging.basicConfig(
        level=level, format="%(asctime)s - %(levelname)s - %(message)s"
    )


def build_server(config: Configuration) -> uvicorn.Server:
    """Create the uvicorn server for the gateway application."""
    server_config = config.get_server_config()
    app = create_app(config)

    logging.info(
        f"Signup assistant gateway configured on "
        f"{server_config['host']}:{server_config['port']}"
    )
    return uvicorn.Server(
        uvicorn.Config(
            app,
            host=server_config["host"],
            port=server_config["port"],
            log_level=server_config["log_level"],
        )
    )


async def main(config: Configuration | None = None) -> None:
    """Main entry point - HTTP gateway until uvicorn handles a shutdown signal."""
    config = config or Configuration()
    configure_logging(config)

    server = build_server(config)
    try:
        await server.serve()
    except Exception as e:
        logging.error(f"Application error: {e}")
        raise
    finally:
        logging.info("Application shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
