"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hifi import __version__
from hifi.api.errors import register_error_handlers
from hifi.config import get_settings
from hifi.deposits.factory import get_deposit_service, get_retention_sweeper
from hifi.pools.database import close_db, init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    await init_db()
    sweeper = get_retention_sweeper()
    sweeper.start()
    yield
    # Shutdown
    await sweeper.stop()
    await get_deposit_service().orchestrator.shutdown()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="HiFi API",
        description="Cross-chain pooled deposit API",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Register routes
    from hifi.api.routes import deposits, health, pools

    app.include_router(health.router, tags=["Health"])
    app.include_router(deposits.router, prefix="/api", tags=["Deposits"])
    app.include_router(pools.router, prefix="/api", tags=["Pools"])

    return app


# Default app instance
app = create_app()
