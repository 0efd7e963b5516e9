"""Main FastAPI application"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from streamflow.config import settings
from streamflow.database import SessionLocal, init_db, session_scope
from streamflow.errors import NotFound, ProviderError, StoreUnavailable, UnknownSource
from streamflow.api import library, playback, playlists, queue, search
from streamflow.api import settings as settings_api
from streamflow.services.aggregator import SourceAggregator
from streamflow.services.library_service import LibraryService
from streamflow.services.offline_service import OfflineService
from streamflow.services.playback_service import ClientPlaybackBackend, PlayerService
from streamflow.services.providers import build_discovery, build_providers
from streamflow.services.queue_service import PlaybackQueue
from streamflow.services.response_cache import ResponseCache

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown"""
    # Startup
    logger.info("Starting StreamFlow API...")

    init_db()
    logger.info("Database initialized")

    # Retention sweep on start
    try:
        with session_scope(SessionLocal) as db:
            LibraryService(db).cleanup()
    except StoreUnavailable as e:
        logger.error(f"Retention sweep failed: {e}")

    cache = ResponseCache(settings.cache_ttl_seconds)
    aggregator = SourceAggregator(
        build_providers(settings, cache),
        timeout=settings.provider_timeout_seconds,
        trending_limit=settings.trending_limit,
        discovery=build_discovery(settings, cache)
    )
    queue = PlaybackQueue()
    player = PlayerService(queue, aggregator, ClientPlaybackBackend(), session_factory=SessionLocal)
    try:
        player.load_preferences()
    except StoreUnavailable as e:
        logger.error(f"Could not load preferences: {e}")

    app.state.cache = cache
    app.state.aggregator = aggregator
    app.state.queue = queue
    app.state.player = player
    app.state.offline = OfflineService(aggregator, session_factory=SessionLocal)
    logger.info(f"Sources ready: {', '.join(aggregator.sources()) or 'none'}")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down...")
    aggregator.close()


# Create FastAPI app
app = FastAPI(
    title="StreamFlow API",
    description="Multi-source music search, library and playback queue",
    version="0.1.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(UnknownSource)
async def unknown_source_handler(request: Request, exc: UnknownSource):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    logger.warning(f"Upstream failure: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"Store unavailable: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


# Register routers
app.include_router(search.router)
app.include_router(playlists.router)
app.include_router(library.router)
app.include_router(queue.router)
app.include_router(playback.router)
app.include_router(settings_api.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "StreamFlow API",
        "version": "0.1.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "streamflow.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
