"""Entry point for the FastAPI application."""

from __future__ import annotations

from fastapi import FastAPI

from .routes import health
from .routes import projects
from .routes import share


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Lease Tracker Dashboard Service",
        version="0.1.0",
        description=(
            "Project dashboards for the lease tracker: reorderable cards over the hosted "
            "backend's project data, plus public share links."
        ),
    )
    app.include_router(health.router)
    app.include_router(projects.router)
    app.include_router(share.router)
    return app


app = create_app()
