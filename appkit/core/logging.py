import logging
import sys

from appkit.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class RequestLogger(logging.LoggerAdapter):
    """Logger bound to one request: every line starts with ``[<request_id>] ``."""

    def __init__(self, logger: logging.Logger, request_id: str):
        super().__init__(logger, {"request_id": request_id})
        self.request_id = request_id

    def process(self, msg, kwargs):
        # keep caller-supplied extra, but request_id always wins
        kwargs["extra"] = {**(kwargs.get("extra") or {}), **self.extra}
        return f"[{self.request_id}] {msg}", kwargs


_default_logger = logging.getLogger(settings.request_logger_name)


def _request_logger() -> logging.Logger:
    # used outside appkit.main: nobody configured the root yet
    if not logging.getLogger().handlers:
        configure_logging(settings.log_level)
    return _default_logger


def default_logger() -> logging.Logger:
    return _request_logger()


def new_request_logger(request_id: str) -> RequestLogger:
    return RequestLogger(_request_logger(), request_id)


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level)

    # avoid duplicate handlers when called twice
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
