"""
Staff Directory API - Main Application Entry Point

FastAPI backend for the staff directory access core.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from staff_directory.api.config import settings
from staff_directory.api.services.background_tasks import init_background_workers, close_background_workers


async def bootstrap_admin() -> None:
    """Seed the configured super_admin identity, if any."""
    if not (settings.BOOTSTRAP_ADMIN_USERNAME and settings.BOOTSTRAP_ADMIN_PASSWORD):
        return

    from staff_directory.api.access.audit import AccessAuditLog
    from staff_directory.api.auth.service import AuthService, ensure_bootstrap_admin
    from staff_directory.api.auth.sessions import SessionStore
    from staff_directory.api.dependencies import open_repositories

    async with open_repositories() as repos:
        service = AuthService(
            repos.identities,
            SessionStore(repos.sessions),
            AccessAuditLog(repos.access_logs),
        )
        await ensure_bootstrap_admin(
            service,
            settings.BOOTSTRAP_ADMIN_USERNAME,
            settings.BOOTSTRAP_ADMIN_PASSWORD,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    if settings.STORAGE_BACKEND == "sql":
        from staff_directory.api.db.session import init_db
        await init_db()
    await bootstrap_admin()
    await init_background_workers()
    yield
    # Shutdown
    await close_background_workers()
    if settings.STORAGE_BACKEND == "sql":
        from staff_directory.api.db.session import close_db
        await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Staff Directory - authentication, role permissions and access audit",
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from staff_directory.api.auth.routes import router as auth_router
    from staff_directory.api.staff.routes import router as staff_router
    from staff_directory.api.access_logs.routes import router as access_logs_router
    from staff_directory.api.departments.routes import router as departments_router

    app.include_router(auth_router, prefix="/api/v1/auth", tags=["Authentication"])
    app.include_router(staff_router, prefix="/api/v1/staff", tags=["Staff"])
    app.include_router(access_logs_router, prefix="/api/v1/access-logs", tags=["Access Logs"])
    app.include_router(departments_router, prefix="/api/v1/departments", tags=["Departments"])

    # Health check endpoint
    @app.get("/api/health", tags=["Health"])
    async def health_check():
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "service": settings.APP_NAME,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "staff_directory.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
