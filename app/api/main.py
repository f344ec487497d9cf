"""
FastAPI application entry point for the movie recommender API.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.config import get_api_host, get_api_port, get_log_file, get_log_level
from app.api.dependencies import build_store_provider
from app.api.routers import auth, movies, ratings, recommendations, system
from app.core.errors import InvalidInput, NotFound, RecommenderError, StoreUnavailable
from app.core.store import StoreProvider
from app.utils.logging_config import configure_api_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store on startup, check connectivity, close it on shutdown."""
    if getattr(app.state, "store_provider", None) is None:
        app.state.store_provider = build_store_provider()
    try:
        app.state.store_provider.verify_connectivity()
    except StoreUnavailable as e:
        logger.error("Store connectivity check failed: %s", e)
    yield
    app.state.store_provider.close()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Dados inválidos"})


async def domain_exception_handler(request: Request, exc: RecommenderError):
    if isinstance(exc, InvalidInput):
        return JSONResponse(status_code=400, content={"error": "Dados inválidos"})
    if isinstance(exc, NotFound):
        return JSONResponse(status_code=404, content={"error": "Registro não encontrado"})
    logger.error("Store failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Erro interno do servidor"})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"error": "Erro interno do servidor"})


def create_app(store_provider: Optional[StoreProvider] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store_provider: Store to serve requests from. When omitted, one is
            built from the environment at startup.
    """
    configure_api_logging(level=get_log_level(), log_file=get_log_file())

    app = FastAPI(
        title="Movie Recommender API",
        description="Login, movie ratings and genre-affinity recommendations",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store_provider = store_provider

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RecommenderError, domain_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(auth.router)
    app.include_router(movies.router)
    app.include_router(ratings.router)
    app.include_router(recommendations.router)
    app.include_router(system.router)

    @app.get("/")
    def root():
        """Root endpoint."""
        return {
            "message": "Movie Recommender API",
            "docs": "/docs",
            "health": "/api/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=get_api_host(), port=get_api_port())
