from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern, Tuple

import anyio
import anyio.to_thread
from starlette.convertors import Convertor
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import compile_path
from starlette.types import Receive, Scope, Send

from appkit.core.context import RouteHandler
from appkit.transport.asgi import AsgiResponseWriter

logger = logging.getLogger("app.transport")


@dataclass
class _Route:
    path: str
    regex: Pattern[str]
    convertors: Dict[str, Convertor]
    handlers: Dict[str, RouteHandler] = field(default_factory=dict)


class Router:
    def __init__(self) -> None:
        self._routes: List[_Route] = []

    def handle(self, method: str, path: str, handler: RouteHandler) -> None:
        method = method.upper()
        route = next((r for r in self._routes if r.path == path), None)
        if route is None:
            regex, _, convertors = compile_path(path)
            route = _Route(path=path, regex=regex, convertors=convertors)
            self._routes.append(route)
        if method in route.handlers:
            raise ValueError(f"handler already registered for {method} {path}")
        route.handlers[method] = handler

    def get(self, path: str, handler: RouteHandler) -> None:
        self.handle("GET", path, handler)

    def lookup(
        self, method: str, path: str
    ) -> Tuple[Optional[RouteHandler], Dict[str, Any], List[str]]:
        """Return (handler, params, allowed methods) for a request line."""
        for route in self._routes:
            match = route.regex.match(path)
            if match is None:
                continue
            params = {
                key: route.convertors[key].convert(value)
                for key, value in match.groupdict().items()
            }
            return route.handlers.get(method.upper()), params, sorted(route.handlers)
        return None, {}, []

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            raise RuntimeError(f"unsupported scope type {scope['type']!r}")

        handler, params, allowed = self.lookup(scope["method"], scope["path"])
        if handler is None:
            if allowed:
                response = PlainTextResponse(
                    "Method Not Allowed", status_code=405, headers={"Allow": ", ".join(allowed)}
                )
            else:
                response = PlainTextResponse("Not Found", status_code=404)
            await response(scope, receive, send)
            return

        request = Request(scope, receive)
        # drain the body so the disconnect watcher is the only reader of receive
        await request.body()

        w = AsgiResponseWriter(send)
        error: Optional[Exception] = None
        async with anyio.create_task_group() as tg:
            tg.start_soon(_watch_disconnect, receive, w)
            try:
                await anyio.to_thread.run_sync(handler, w, request, params)
            except Exception as exc:
                error = exc
            tg.cancel_scope.cancel()

        if error is not None:
            if w.started:
                logger.error("handler failed after the response started: %r", error)
            raise error
        await w.finish()


async def _watch_disconnect(receive: Receive, w: AsgiResponseWriter) -> None:
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            w.mark_disconnected()
            return
