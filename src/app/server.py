"""ApiServer — run the gateway on a background thread inside a host process.

Use this when the simulation owns the main thread (an embedding host):
``start()`` returns immediately, ``stop()`` stops accepting connections and
lets in-flight requests finish before the thread exits.  Headless runs go
through ``python -m app`` instead, which gives uvicorn the main thread.
"""

from __future__ import annotations

import threading

import uvicorn
from loguru import logger

from app.config import Settings, settings as default_settings
from app.main import create_app
from spawnbridge.simulation import BridgeContext, TickDriver


class ApiServer:
    def __init__(
        self,
        context: BridgeContext,
        *,
        driver: TickDriver | None = None,
        cfg: Settings | None = None,
    ) -> None:
        self._cfg = cfg or default_settings
        self._app = create_app(context, driver=driver, cfg=self._cfg)
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None

    @property
    def app(self):
        return self._app

    @property
    def url(self) -> str:
        return f"http://{self._cfg.host}:{self._cfg.port}/"

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            logger.warning("API server is already running")
            return
        config = uvicorn.Config(
            self._app,
            host=self._cfg.host,
            port=self._cfg.port,
            log_level="warning",
        )
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(target=self._serve, name="api-server", daemon=True)
        self._thread.start()
        logger.info(f"HTTP API Server started on {self.url}")

    def _serve(self) -> None:
        try:
            self._server.run()
        except Exception as e:
            logger.error(f"Failed to start HTTP server: {e}")

    def stop(self, timeout: float = 5.0) -> None:
        if self._server is None:
            return
        self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        self._server = None
        self._thread = None
        logger.info("HTTP API Server stopped")
