# Standard library imports
from contextlib import asynccontextmanager
from typing import cast
from uuid import UUID

# Third-party imports
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Local application imports
from civicvoice.api.internal.main import router as internal_router
from civicvoice.api.internal.utils.exceptions import register_exception_handlers
from civicvoice.core.db import build_async_engine, build_session_factory, run_with_new_session
from civicvoice.core.monitoring import get_logger, setup_sentry
from civicvoice.middleware import RequestIDMiddleware
from civicvoice.models import Admin, AdminRole, Base
from civicvoice.settings import CommonSettings, get_settings
from civicvoice.utils.datetime_utils import utc_now

# Set up the main application logger
logger = get_logger("civicvoice")


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def create_default_superadmin(
    session_factory: async_sessionmaker[AsyncSession], settings: CommonSettings
) -> UUID | None:
    """Make sure the configured superadmin exists. Skipped when no email is configured."""
    if not settings.DEFAULT_SUPERADMIN_EMAIL:
        return None

    async def _seed(db: AsyncSession) -> UUID:
        email = settings.DEFAULT_SUPERADMIN_EMAIL.strip().lower()
        result = await db.execute(select(Admin).where(Admin.email == email))
        existing_admin = result.scalar_one_or_none()

        if existing_admin is not None:
            logger.info("Superadmin already exists.")
            return cast(UUID, existing_admin.id)

        superadmin = Admin(
            name=settings.DEFAULT_SUPERADMIN_NAME,
            email=email,
            role=AdminRole.SUPERADMIN,
            region=settings.DEFAULT_SUPERADMIN_REGION,
            can_update_status=True,
            can_delete_issues=True,
            can_manage_users=True,
            can_view_analytics=True,
        )
        db.add(superadmin)
        await db.commit()
        logger.info("Superadmin created.")
        return cast(UUID, superadmin.id)

    return await run_with_new_session(session_factory, _seed)


# ---- FASTAPI APP CREATION ----
def custom_generate_unique_id(route: APIRoute) -> str:
    # Handle routes without tags
    if route.tags and len(route.tags) > 0:
        return f"{route.tags[0]}-{route.name}"
    else:
        return route.name or "unnamed_route"


def create_app(settings: CommonSettings | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    settings = settings or get_settings()

    if setup_sentry(settings):
        logger.info(f"Sentry initialised in {settings.ENVIRONMENT} environment")

    engine = build_async_engine(settings)
    session_factory = build_session_factory(engine)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        # Startup
        logger.info("Starting up CivicVoice API")

        if settings.AUTO_CREATE_TABLES:
            await create_tables(engine)
            logger.info("Database tables ready")

        try:
            admin_id = await create_default_superadmin(session_factory, settings)
            if admin_id is not None:
                logger.info(f"Superadmin ready with ID: {admin_id}")
        except Exception:
            logger.exception("Failed to create default superadmin")

        yield

        # Shutdown
        logger.info("Shutting down CivicVoice API")
        await engine.dispose()

    # Create FastAPI app
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Civic issue reporting: upvotes, region-scoped triage and an admin audit trail",
        openapi_url=f"{settings.API_V1_STR}/openapi.json" if settings.ENVIRONMENT != "production" else None,
        docs_url=f"{settings.API_V1_STR}/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url=f"{settings.API_V1_STR}/redoc" if settings.ENVIRONMENT != "production" else None,
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    # Storage and collaborators live on the app, never in module globals
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.clock = utc_now

    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            database = "connected"
        except Exception:
            logger.exception("Health check could not reach the database")
            database = "unavailable"
        return {"status": "healthy", "version": "1.0.0", "database": database}

    app.include_router(internal_router, prefix=settings.API_V1_STR)

    return app


# Create the app instance
app = create_app()
