from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storegate import __version__
from storegate.api.deps import get_app_config
from storegate.api.routers import pages, permissions, session
from storegate.api.schemas.common import ErrorResponse
from storegate.common.config import get_alias_table
from storegate.common.logger import configure_logging, get_logger
from storegate.core.config import get_settings
from storegate.core.rbac.errors import CatalogLoadError
from storegate.core.rbac.session import reset_session

logger = get_logger("api")


def create_app() -> FastAPI:
    """Build the application with a fresh process-wide session."""
    settings = get_settings()
    config = get_app_config()

    configure_logging(config.logging)
    reset_session(get_alias_table(config))

    app = FastAPI(
        title=settings.app_name,
        description="Permission evaluation and route guarding for the retail back office",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CatalogLoadError)
    async def catalog_load_error_handler(request: Request, exc: CatalogLoadError):
        logger.warning(f"Rejected catalog on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse(error="catalog_load_error", detail=str(exc)).model_dump(),
        )

    app.include_router(session.router, prefix="/api")
    app.include_router(permissions.router, prefix="/api")
    app.include_router(pages.router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": __version__}

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": __version__,
            "docs": "/docs" if settings.debug else None,
        }

    return app


app = create_app()
