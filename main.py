import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.auth import router as auth_router
from api.collaterals import router as collaterals_router
from api.customers import router as customers_router
from api.errors import register_exception_handlers
from api.loan_applications import router as loan_applications_router
from api.loan_products import router as loan_products_router
from api.loans import router as loans_router
from api.middleware import RequestLoggingMiddleware
from api.partner import router as partner_router
from config import Settings, settings as default_settings
from database import build_engine, build_sessionmaker, init_db
from utils.logger import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around one engine/sessionmaker kept on app.state."""
    settings = settings or default_settings
    configure_logging(settings.log_level)

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db(engine)
        logger.info("%s started (%s)", settings.app_name, settings.environment)
        yield
        await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Loan management API for an NBFC lending against mutual funds",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)

    app.add_middleware(RequestLoggingMiddleware, slow_request_ms=settings.slow_request_ms)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, expose_details=settings.is_development)

    app.include_router(auth_router)
    app.include_router(customers_router)
    app.include_router(loan_products_router)
    app.include_router(loan_applications_router)
    app.include_router(collaterals_router)
    app.include_router(loans_router)
    app.include_router(partner_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    return app


app = create_app()
