"""FastAPI application for the skillplan web API."""

from fastapi import FastAPI

from skillplan.web.routes import queue_router, skills_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="skillplan",
        description="Skill training queue resolution",
        version="0.1.0",
    )

    # Routes
    app.include_router(queue_router, prefix="/queue", tags=["queue"])
    app.include_router(skills_router, prefix="/skills", tags=["skills"])

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


# Create the app instance for uvicorn
app = create_app()
