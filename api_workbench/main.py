"""
API Workbench - FastAPI Application Entry Point

A Postman-like request workbench: templated request definitions,
environments, single executions with assertions, and sequential
collection runs with response chaining.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .database import init_db
from .exceptions import register_exception_handlers
from .routers import requests, collections, environments, execute, runs
from .services.run_registry import RunRegistry


settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    app.state.run_registry = RunRegistry(retention=settings.run_retention)
    logger.info("API Workbench started")
    yield
    # Shutdown: stop runs still in progress
    app.state.run_registry.stop_all()


app = FastAPI(
    title="API Workbench",
    description="A Postman-like workbench for templating, executing and chaining HTTP requests",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
register_exception_handlers(app)


@app.get("/")
async def root():
    """Root endpoint returning API information."""
    return {
        "name": "API Workbench",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Register routers
app.include_router(requests.router)
app.include_router(collections.router)
app.include_router(environments.router)
app.include_router(execute.router)
app.include_router(runs.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
