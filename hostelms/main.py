import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import admin, auth, leave_requests, payments, rooms, student, users
from .config import Settings, settings as default_settings
from .core.error_handlers import register_exception_handlers
from .core.logging_config import setup_logging
from .core.middleware import RequestLoggingMiddleware
from .database import Database
from .services.mailer import Mailer

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    """Build the application. Tests pass their own database and mailer."""
    settings = settings or default_settings
    setup_logging(settings)

    database = database or Database(settings.database_url, echo=settings.debug)
    mailer = mailer or Mailer(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s (%s)", settings.app_name, settings.environment)
        database.connect()
        database.create_all()
        yield
        logger.info("Shutting down %s", settings.app_name)
        database.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Hostel management: rooms, leave requests and payments",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.mailer = mailer

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings)

    # Include routers
    app.include_router(auth.router)
    app.include_router(rooms.router)
    app.include_router(leave_requests.router)
    app.include_router(payments.router)
    app.include_router(users.router)
    app.include_router(student.router)
    app.include_router(admin.router)

    @app.get("/health", tags=["health"])
    def health_check():
        return {"status": "healthy", "app_name": settings.app_name, "environment": settings.environment}

    return app


app = create_app()
