"""
FastAPI application initialization for the chat co-moderator host API.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from comoderator.config import settings
from comoderator.core.logging import setup_logging
from comoderator.api.v1.router import api_router

# Setup logging
setup_logging()

# Create FastAPI application
app = FastAPI(
    title=settings.project_name,
    version=settings.version,
    description="Joins a Zoom web meeting, answers chat questions with AI and streams events to the host",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    """
    Application startup event.
    Create the moderation engine and record its events for the host.
    """
    from comoderator.core.dependencies import set_engine_instance
    from comoderator.core.logging import get_logger
    from comoderator.engine import ModerationEngine
    from comoderator.events import EventLog

    logger = get_logger("startup")
    logger.info("Starting co-moderator API...")

    engine = ModerationEngine(app_config=settings)
    event_log = EventLog(maxlen=settings.api.event_buffer_size)
    engine.events.subscribe(None, event_log)
    set_engine_instance(engine, event_log)

    logger.info("Co-moderator API started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Application shutdown event.
    Leave any active meeting and release the browser.
    """
    from comoderator.core.dependencies import get_engine, set_engine_instance
    from comoderator.core.logging import get_logger

    logger = get_logger("shutdown")
    logger.info("Shutting down co-moderator API...")

    try:
        engine = await get_engine()
        await engine.shutdown()
    except Exception as e:
        logger.warning(f"Error during shutdown: {e}")
    finally:
        set_engine_instance(None)

    logger.info("Co-moderator API shutdown complete")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - redirect to API docs.
    """
    from fastapi.responses import RedirectResponse
    return RedirectResponse(url="/api/docs")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "comoderator.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
