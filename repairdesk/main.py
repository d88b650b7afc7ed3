# repairdesk/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from repairdesk import __version__
from repairdesk.config import get_settings
from repairdesk.core.registry import get_registry
from repairdesk.middleware_logging import configure_logging, register_request_logging
from repairdesk.error_handlers import register_error_handlers
from repairdesk.routers.health import router as health_router
from repairdesk.routers.jobs import router as jobs_router

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("repairdesk")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Same provider the routes resolve, so overrides are honoured here too.
    registry = app.dependency_overrides.get(get_registry, get_registry)()
    app.state.registry = registry
    logger.info("Starting repairdesk on port %s (data dir %s)", settings.PORT, settings.DATA_DIR)
    if not settings.whatsapp_configured:
        logger.warning("WHATSAPP_API_TOKEN / WHATSAPP_PHONE_ID not set; auto-send will only be logged")

    yield

    # Let in-flight receipts finish; they are never cancelled.
    await registry.drain()
    logger.info("Shutting down repairdesk")


# =========================
# ---- App Init ----
# =========================
app = FastAPI(title="Sri Sai Technologies Job Cards", version=__version__, lifespan=lifespan)
register_request_logging(app)
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root():
    return {"message": f"{settings.COMPANY_NAME} job card service"}


app.include_router(health_router)
app.include_router(jobs_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("repairdesk.main:app", host="0.0.0.0", port=settings.PORT)
