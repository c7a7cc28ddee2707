"""Main entry point - runs the API server."""

import asyncio
import logging
import signal

import uvicorn

from swapquote.api.app import create_app
from swapquote.config import get_settings

logger = logging.getLogger(__name__)


class Application:
    """Runs the HTTP API until a shutdown signal arrives."""

    def __init__(self):
        self.settings = get_settings()
        self.server = None

    async def start(self):
        """Start the API server."""
        # Configure logging
        log_level = logging.DEBUG if self.settings.debug else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        logger.info("Starting swapquote...")
        logger.info(f"Environment: {self.settings.environment}")

        config = uvicorn.Config(
            create_app(),
            host=self.settings.api_host,
            port=self.settings.port,
            log_level="debug" if self.settings.debug else "info",
        )
        self.server = uvicorn.Server(config)
        logger.info(f"Application is running on: http://localhost:{self.settings.port}")
        logger.info(f"API documentation available at: http://localhost:{self.settings.port}/api")
        await self.server.serve()

    def shutdown(self):
        """Signal shutdown."""
        logger.info("Shutdown requested")
        if self.server is not None:
            self.server.should_exit = True


def main():
    """Main entry point."""
    app = Application()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, app.shutdown)

    try:
        loop.run_until_complete(app.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        loop.close()


if __name__ == "__main__":
    main()
