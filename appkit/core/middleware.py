import logging
import secrets
import string
import time
from typing import Union

from starlette.requests import Request

from appkit.core.config import settings
from appkit.core.context import Context, ContextHandler, Params
from appkit.core.logging import RequestLogger, default_logger, new_request_logger
from appkit.core.writer import ResponseWriter, wrap_logging_response_writer

# private object so no other module can shadow the binding
LOGGER_KEY = object()


class RequestIdError(RuntimeError):
    """The random source failed; the request cannot be correlated in the logs."""


def make_request_id() -> str:
    try:
        token = "".join(
            secrets.choice(string.ascii_letters)
            for _ in range(settings.request_id_token_length)
        )
    except (NotImplementedError, OSError) as exc:
        raise RequestIdError("cannot generate request id") from exc
    return f"{token}{int(time.time()):x}"


def wrap_logging_handler(handler: ContextHandler) -> ContextHandler:
    def handle(ctx: Context, w: ResponseWriter, request: Request, params: Params) -> None:
        logging_w = wrap_logging_response_writer(w)

        logger = new_request_logger(make_request_id())
        ctx = ctx.with_value(LOGGER_KEY, logger)

        start = time.perf_counter()
        _write_start_line(logger, request, params)

        handler(ctx, logging_w, request, params)

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        _write_end_line(logger, request, logging_w.status, logging_w.size, elapsed_ms)

    return handle


def get_logger_from_context(ctx: Context) -> Union[RequestLogger, logging.Logger]:
    logger = ctx.value(LOGGER_KEY)
    if isinstance(logger, RequestLogger):
        return logger
    return default_logger()


def _request_uri(request: Request) -> str:
    url = request.url
    if url.query:
        return f"{url.path}?{url.query}"
    return url.path


def _write_start_line(logger: RequestLogger, request: Request, params: Params) -> None:
    line = f"Handling {request.method} {_request_uri(request)}"
    if params:
        line += " " + " ".join(f"{key}={value}" for key, value in params.items())
    logger.info(line)


def _write_end_line(
    logger: RequestLogger,
    request: Request,
    status: int,
    size: int,
    elapsed_ms: int,
) -> None:
    logger.info(
        "Completed %s %s (%d, %dms, %d bytes)",
        request.method,
        _request_uri(request),
        status,
        elapsed_ms,
        size,
    )
