"""Response writer protocols and the status/size recording decorator."""

from __future__ import annotations

import threading
from typing import Any, Protocol, Tuple, runtime_checkable

from starlette import status as http_status


@runtime_checkable
class ResponseWriter(Protocol):
    def header(self) -> Any: ...

    def write(self, data: bytes) -> int: ...

    def write_header(self, status_code: int) -> None: ...


@runtime_checkable
class Flusher(Protocol):
    def flush(self) -> None: ...


@runtime_checkable
class Hijacker(Protocol):
    def hijack(self) -> Tuple[Any, Any]: ...


@runtime_checkable
class CloseNotifier(Protocol):
    def close_notify(self) -> threading.Event: ...


class ResponseLogger:
    """Records the status code and the number of bytes written through it."""

    def __init__(self, w: ResponseWriter):
        self._w = w
        self._status = 0
        self._size = 0

    @property
    def status(self) -> int:
        return self._status

    @property
    def size(self) -> int:
        return self._size

    def header(self) -> Any:
        return self._w.header()

    def write(self, data: bytes) -> int:
        if self._status == 0:
            # status is 200 if write_header has not been called yet
            self._status = http_status.HTTP_200_OK
        try:
            n = self._w.write(data)
        except BlockingIOError as exc:
            self._size += exc.characters_written
            raise
        self._size += n
        return n

    def write_header(self, status_code: int) -> None:
        self._w.write_header(status_code)
        self._status = status_code

    def flush(self) -> None:
        if isinstance(self._w, Flusher):
            self._w.flush()


class HijackLogger(ResponseLogger):
    def hijack(self) -> Tuple[Any, Any]:
        conn, rw = self._w.hijack()
        if self._status == 0:
            # 101 if the hijack succeeded and write_header has not been called yet
            self._status = http_status.HTTP_101_SWITCHING_PROTOCOLS
        return conn, rw


class CloseNotifyLogger(ResponseLogger):
    def close_notify(self) -> threading.Event:
        return self._w.close_notify()


class HijackCloseNotifyLogger(HijackLogger):
    def close_notify(self) -> threading.Event:
        return self._w.close_notify()


def wrap_logging_response_writer(w: ResponseWriter) -> ResponseLogger:
    hijack = isinstance(w, Hijacker)
    close_notify = isinstance(w, CloseNotifier)
    if hijack and close_notify:
        return HijackCloseNotifyLogger(w)
    if hijack:
        return HijackLogger(w)
    if close_notify:
        return CloseNotifyLogger(w)
    return ResponseLogger(w)
