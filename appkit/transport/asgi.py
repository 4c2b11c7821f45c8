"""ResponseWriter over an ASGI send callable, driven from a worker thread."""

from __future__ import annotations

import logging
import threading

import anyio.from_thread
from starlette import status as http_status
from starlette.datastructures import MutableHeaders
from starlette.types import Message, Send

logger = logging.getLogger("app.transport")


class AsgiResponseWriter:
    def __init__(self, send: Send):
        self._send = send
        self._headers = MutableHeaders()
        self._status = http_status.HTTP_200_OK
        self._started = False
        self._finished = False
        self._disconnected = threading.Event()

    @property
    def started(self) -> bool:
        return self._started

    def header(self) -> MutableHeaders:
        return self._headers

    def write_header(self, status_code: int) -> None:
        if self._started:
            logger.warning("superfluous write_header call with status %d", status_code)
            return
        self._status = status_code
        self._call(self._start_message())

    def write(self, data: bytes) -> int:
        if not self._started:
            self._call(self._start_message())
        if data:
            self._call({"type": "http.response.body", "body": bytes(data), "more_body": True})
        return len(data)

    def flush(self) -> None:
        if not self._started:
            self._call(self._start_message())
        self._call({"type": "http.response.body", "body": b"", "more_body": True})

    def close_notify(self) -> threading.Event:
        return self._disconnected

    def mark_disconnected(self) -> None:
        self._disconnected.set()

    async def finish(self) -> None:
        """Send the start message if nothing was written, then end the body."""
        if self._finished:
            return
        if not self._started:
            await self._send(self._start_message())
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})
        self._finished = True

    def _start_message(self) -> Message:
        self._started = True
        return {
            "type": "http.response.start",
            "status": self._status,
            "headers": self._headers.raw,
        }

    def _call(self, message: Message) -> None:
        anyio.from_thread.run(self._send, message)
