from fastapi import FastAPI

from appkit.core.config import settings
from appkit.core.logging import configure_logging
from appkit.api.routes.health import router as health_router
from appkit.api.routes import items
from appkit.transport.router import Router

configure_logging(settings.log_level)


def build_router() -> Router:
    router = Router()
    items.register(router)
    return router


app = FastAPI(title=settings.app_name)

app.include_router(health_router)
# everything FastAPI does not route itself goes through the logging router
app.mount("/", build_router())
