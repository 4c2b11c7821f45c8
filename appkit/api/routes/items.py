from pydantic import BaseModel
from starlette.requests import Request

from appkit.core.context import Context, Params, background, contextize_handler
from appkit.core.middleware import get_logger_from_context, wrap_logging_handler
from appkit.core.writer import CloseNotifier, ResponseWriter
from appkit.transport.router import Router


class Item(BaseModel):
    id: int
    name: str


# read-only catalogue served by the sample routes
ITEMS: dict[int, Item] = {
    7: Item(id=7, name="lamp"),
    42: Item(id=42, name="towel"),
}

STREAM_CHUNKS = 3


def _not_found(ctx: Context, w: ResponseWriter, item_id: int) -> None:
    get_logger_from_context(ctx).info("item_not_found item_id=%d", item_id)
    w.write_header(404)


def get_item(ctx: Context, w: ResponseWriter, request: Request, params: Params) -> None:
    item = ITEMS.get(params["item_id"])
    if item is None:
        _not_found(ctx, w, params["item_id"])
        return

    w.header()["content-type"] = "application/json"
    w.write(item.model_dump_json().encode("utf-8"))


def stream_item(ctx: Context, w: ResponseWriter, request: Request, params: Params) -> None:
    logger = get_logger_from_context(ctx)
    item = ITEMS.get(params["item_id"])
    if item is None:
        _not_found(ctx, w, params["item_id"])
        return

    gone = w.close_notify() if isinstance(w, CloseNotifier) else None
    w.header()["content-type"] = "text/plain; charset=utf-8"
    for n in range(STREAM_CHUNKS):
        if gone is not None and gone.is_set():
            logger.info("client_disconnected chunks_sent=%d", n)
            return
        w.write(f"{item.name} {n}\n".encode("utf-8"))
        w.flush()


def register(router: Router, ctx: Context | None = None) -> None:
    ctx = ctx or background()
    router.get("/items/{item_id:int}", contextize_handler(ctx, wrap_logging_handler(get_item)))
    router.get(
        "/items/{item_id:int}/stream",
        contextize_handler(ctx, wrap_logging_handler(stream_item)),
    )
