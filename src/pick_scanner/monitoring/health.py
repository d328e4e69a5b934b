"""Keep-alive HTTP endpoint and cycle status tracking."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

from aiohttp import web

logger = logging.getLogger(__name__)


@dataclass
class CycleStatus:
    """Outcome of the latest scan and reconciliation runs."""
    last_scan_at: Optional[datetime] = None
    last_scan_summary: str = ""
    last_scan_error: Optional[str] = None
    last_reconciliation_at: Optional[datetime] = None
    last_reconciliation_summary: str = ""

    def record_scan(self, summary: str, error: Optional[str] = None):
        self.last_scan_at = datetime.now(timezone.utc)
        self.last_scan_summary = summary
        self.last_scan_error = error

    def record_reconciliation(self, summary: str):
        self.last_reconciliation_at = datetime.now(timezone.utc)
        self.last_reconciliation_summary = summary

    def to_dict(self) -> Dict:
        return {
            "last_scan_at": self.last_scan_at.isoformat() if self.last_scan_at else None,
            "last_scan_summary": self.last_scan_summary,
            "last_scan_error": self.last_scan_error,
            "last_reconciliation_at": (
                self.last_reconciliation_at.isoformat() if self.last_reconciliation_at else None
            ),
            "last_reconciliation_summary": self.last_reconciliation_summary,
        }


class KeepAliveServer:
    """Tiny web server that answers liveness probes while the scheduler runs."""

    def __init__(self, status: CycleStatus, host: str = "0.0.0.0", port: int = 8080):
        self.status = status
        self.host = host
        self.port = port
        self._runner: Optional[web.AppRunner] = None

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self._handle_root)
        app.router.add_get("/status", self._handle_status)
        return app

    async def _handle_root(self, request: web.Request) -> web.Response:
        return web.Response(text="Bot is running!\n")

    async def _handle_status(self, request: web.Request) -> web.Response:
        return web.json_response(self.status.to_dict())

    async def start(self):
        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"Keep-alive server listening on port {self.port}")

    async def stop(self):
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Keep-alive server stopped")
