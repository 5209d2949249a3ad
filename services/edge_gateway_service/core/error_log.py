"""Append-only error log.

Each record is one line: `[<ISO-8601 timestamp>] [<context>] <message>`.
Writing never raises to the caller; failures go to the structlog channel.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from services.edge_gateway_service.exceptions import ErrorLogWriteError
from services.edge_gateway_service.logging_utils import create_service_logger

logger = create_service_logger("edge_gateway.error_log")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_log_line(timestamp: datetime, context: str, message: str) -> str:
    iso = timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"[{iso}] [{context}] {message}\n"


class FileErrorLog:
    """Error log collaborator backed by a local text file."""

    def __init__(self, path: Path, clock: Callable[[], datetime] = _utc_now) -> None:
        self._path = path
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def _append(self, line: str) -> None:
        try:
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            raise ErrorLogWriteError(self._path, str(e)) from e

    async def record(self, context: str, message: str) -> None:
        """Append one line; write failures are reported but never raised.

        The file write runs in a worker thread so the event loop is not
        blocked by disk I/O.
        """
        line = format_log_line(self._clock(), context, message)
        try:
            await asyncio.to_thread(self._append, line)
        except ErrorLogWriteError as e:
            logger.warning("Failed to write error log", error=e.message)
        logger.error(line.rstrip("\n"), log_context=context)
