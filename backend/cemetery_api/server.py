"""Process entry point: run the API under uvicorn with graceful shutdown.

Uncaught exceptions anywhere in the process (main thread, worker threads or
the event loop) stop accepting connections, let the lifespan handler close
the database pool, and exit. A timer forces the exit if shutdown hangs.
"""
from __future__ import annotations

import asyncio
import logging
import os
import sys
import threading
from typing import Any

import uvicorn

from .config import get_settings
from .logging_config import setup_logging
from .main import create_app

logger = logging.getLogger(__name__)


class GracefulServer(uvicorn.Server):
    def __init__(self, config: uvicorn.Config, *, shutdown_timeout: float) -> None:
        super().__init__(config)
        self.shutdown_timeout = shutdown_timeout
        self._shutdown_started = threading.Event()

    async def startup(self, sockets=None) -> None:
        asyncio.get_running_loop().set_exception_handler(self._on_loop_exception)
        await super().startup(sockets=sockets)

    @property
    def fatal(self) -> bool:
        return self._shutdown_started.is_set()

    def begin_shutdown(self, reason: str) -> None:
        if self._shutdown_started.is_set():
            return
        self._shutdown_started.set()
        logger.critical("Fatal error (%s); shutting down gracefully", reason)
        self.should_exit = True

        timer = threading.Timer(self.shutdown_timeout, self._force_exit)
        timer.daemon = True
        timer.start()

    def _force_exit(self) -> None:
        logger.critical("Graceful shutdown timed out after %ss; forcing exit", self.shutdown_timeout)
        os._exit(1)

    def _on_loop_exception(self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        exc = context.get("exception")
        logger.error("Unhandled exception in event loop: %s", context.get("message"), exc_info=exc)
        self.begin_shutdown("unhandled event loop exception")

    def install_process_hooks(self) -> None:
        def excepthook(exc_type, exc, tb) -> None:
            logger.critical("Uncaught exception", exc_info=(exc_type, exc, tb))
            self.begin_shutdown("uncaught exception")

        def thread_excepthook(args: threading.ExceptHookArgs) -> None:
            logger.critical(
                "Uncaught exception in thread %s",
                getattr(args.thread, "name", "?"),
                exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
            )
            self.begin_shutdown("uncaught thread exception")

        sys.excepthook = excepthook
        threading.excepthook = thread_excepthook


def run() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    app = create_app(settings)

    config = uvicorn.Config(app, host="0.0.0.0", port=settings.PORT, log_config=None)
    server = GracefulServer(config, shutdown_timeout=settings.SHUTDOWN_TIMEOUT_SECONDS)
    server.install_process_hooks()
    logger.info("Listening on port %s", settings.PORT)
    server.run()
    if server.fatal:
        sys.exit(1)


if __name__ == "__main__":
    run()
