from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from scenerag.api.errors import register_exception_handlers
from scenerag.api.routers import chat, search, videos
from scenerag.config.settings import SceneRAGConfig
from scenerag.container import Services, build_services
from scenerag.providers.factory import ProviderFactory
from scenerag.utils.logging_config import log_manager


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Build the API app.

    With ``services`` given (tests) the app uses them as-is and leaves closing
    them to the caller; otherwise services are built from the environment on
    startup and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services is not None:
            app.state.services = services
            yield
            return
        config = SceneRAGConfig()
        log_manager.configure(config.logging)
        app.state.services = build_services(config)
        try:
            yield
        finally:
            logger.info("Shutting down, closing providers")
            await app.state.services.close()

    app = FastAPI(
        title="SceneRAG API",
        description="Scene search and retrieval-augmented chat over advertising videos",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True
    )

    register_exception_handlers(app)
    app.include_router(search.router)
    app.include_router(chat.router)
    app.include_router(videos.router)

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint providing API information."""
        return {
            "message": "SceneRAG API",
            "version": "0.1.0",
            "docs_url": "/docs",
            "openapi_url": "/openapi.json"
        }

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "scenerag"}

    @app.get("/providers", tags=["providers"])
    async def get_supported_providers():
        """Get information about supported providers."""
        return {
            "supported_providers": ProviderFactory.get_supported_providers(),
            "message": "These are the currently supported providers for each service type"
        }

    return app
