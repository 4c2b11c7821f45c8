from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from starlette.requests import Request

from appkit.core.writer import ResponseWriter

Params = Mapping[str, Any]
RouteHandler = Callable[[ResponseWriter, Request, Params], None]


class Context:
    __slots__ = ("_parent", "_key", "_value")

    def __init__(self, parent: Optional["Context"] = None, key: Any = None, value: Any = None):
        self._parent = parent
        self._key = key
        self._value = value

    def with_value(self, key: Any, value: Any) -> "Context":
        if key is None:
            raise ValueError("context key must not be None")
        return Context(self, key, value)

    def value(self, key: Any, default: Any = None) -> Any:
        ctx: Optional[Context] = self
        while ctx is not None and ctx._parent is not None:
            if ctx._key == key:
                return ctx._value
            ctx = ctx._parent
        return default

    def __repr__(self) -> str:
        depth = 0
        ctx = self
        while ctx._parent is not None:
            depth += 1
            ctx = ctx._parent
        return f"<Context values={depth}>"


_background = Context()


def background() -> Context:
    """Root context with no values; shared by the whole process."""
    return _background


ContextHandler = Callable[[Context, ResponseWriter, Request, Params], None]


def contextize_handler(ctx: Context, fn: ContextHandler) -> RouteHandler:
    """Bind ``ctx`` to ``fn`` so it can be registered with the router."""

    def handle(w: ResponseWriter, request: Request, params: Params) -> None:
        fn(ctx, w, request, params)

    return handle


def decontextize_handler(fn: RouteHandler) -> ContextHandler:
    def handle(ctx: Context, w: ResponseWriter, request: Request, params: Params) -> None:
        fn(w, request, params)

    return handle
