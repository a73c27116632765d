import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studio.api.v1.router import api_v1_router
from studio.core.config import settings, validate_settings_for_production
from studio.core.exceptions import register_exception_handlers
from studio.core.logging import setup_logging
from studio.core.middleware import RequestLoggingMiddleware
from studio.db.session import create_db_engine, create_session_factory, init_db
from studio.db.store import PersistenceStore
from studio.gateway.client import GatewayClient
from studio.gateway.transport import TransportClient

# Configure logging before anything else
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    validate_settings_for_production()
    logger.info("Starting image studio...")

    engine = create_db_engine(settings.database_url)
    init_db(engine)
    app.state.store = PersistenceStore(
        create_session_factory(engine),
        default_api_url=settings.default_api_url,
        default_model=settings.default_model,
    )
    app.state.gateway = GatewayClient(
        policy=settings.retry_policy(),
        transport=TransportClient(timeout=settings.gateway_timeout_seconds),
    )

    yield

    # Shutdown
    engine.dispose()
    logger.info("Image studio shut down")


app = FastAPI(
    title="Image Studio",
    description="AI image editing with a gallery, style library and token statistics",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
)

register_exception_handlers(app)

# Request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# CORS — parse allowed_origins from settings (comma-separated)
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(api_v1_router)


@app.get("/api/v1/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("studio.main:app", host=settings.app_host, port=settings.app_port, reload=settings.app_debug)
