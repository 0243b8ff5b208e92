"""Main entry point - serves the HiFi API."""

import asyncio
import logging
import signal

import uvicorn

from hifi.api.app import create_app
from hifi.config import Settings, get_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    """Set up root logging for the process."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=LOG_FORMAT,
    )
    # SQL echo is far too chatty at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


class Application:
    """Runs the API server; its lifespan owns the sweeper and orchestrations."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.server: uvicorn.Server | None = None
        self._stop = asyncio.Event()

    def _build_server(self) -> uvicorn.Server:
        config = uvicorn.Config(
            create_app(),
            host=self.settings.api_host,
            port=self.settings.api_port,
            log_level="debug" if self.settings.debug else "info",
        )
        return uvicorn.Server(config)

    async def start(self):
        """Serve until the server exits or a shutdown is requested."""
        configure_logging(self.settings)

        logger.info(f"Starting HiFi ({self.settings.environment})")
        logger.info(
            f"Source chains: {', '.join(sorted(self.settings.source_chains))} -> "
            f"{self.settings.destination_chain}; bridge={self.settings.bridge_provider}, "
            f"vault={self.settings.vault_provider}"
        )

        self.server = self._build_server()
        serve = asyncio.create_task(self._serve())
        stop = asyncio.create_task(self._stop.wait())
        await asyncio.wait({serve, stop}, return_when=asyncio.FIRST_COMPLETED)

        # Graceful exit runs the lifespan shutdown (sweeper, orchestrations, DB)
        self.server.should_exit = True
        await asyncio.gather(serve, return_exceptions=True)
        stop.cancel()
        logger.info("HiFi stopped")

    async def _serve(self):
        logger.info(f"API listening on {self.settings.api_host}:{self.settings.api_port}")
        try:
            await self.server.serve()
        except asyncio.CancelledError:
            logger.info("API server cancelled")
        except Exception as e:
            logger.error(f"API server failed: {e}")
            raise

    def shutdown(self):
        """Request a graceful stop (signal handler)."""
        logger.info("Shutdown requested")
        self._stop.set()


def main():
    """Console entry point."""
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
