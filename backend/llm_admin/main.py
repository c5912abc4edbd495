import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from llm_admin.config import validate_admin_password

logger = logging.getLogger(__name__)
from llm_admin.routes import admin, groups, health, llm, users
from llm_admin.services.catalog import model_catalog
from llm_admin.database import init_db, async_session, cleanup_expired_sessions
from llm_admin.utils.seed import ensure_admin_user, seed_default_providers

# Validate admin password before app starts
validate_admin_password()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle events"""
    # Initialize database
    await init_db()

    # Seed default providers if not initialized
    async with async_session() as session:
        result = await seed_default_providers(session)
        if result["status"] == "success":
            logger.info(f"Database seeded: {result['providers_created']} providers")

    # Bootstrap administrator account
    async with async_session() as session:
        result = await ensure_admin_user(session)
        logger.info(result["message"])

    # Cleanup expired sessions
    await cleanup_expired_sessions()

    # Startup: Load the model catalog from database
    await model_catalog.initialize()

    yield

    # Shutdown: Drop the cached catalog
    model_catalog.clear()


app = FastAPI(
    title="LLM Admin API",
    description="Provider and model administration for the chat application",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware (the admin UI is served from a different origin in dev)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(llm.router, prefix="/api", tags=["llm"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
app.include_router(groups.router, prefix="/api/admin", tags=["groups"])
app.include_router(users.router, prefix="/api", tags=["users"])
