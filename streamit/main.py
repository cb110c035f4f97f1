import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from streamit.api.routes_api import router as api_router
from streamit.api.routes_ui import router as ui_router
from streamit.core.config import get_settings
from streamit.providers import build_registry
from streamit.services.catalog import CatalogClient
from streamit.services.sessions import SessionStore

load_dotenv()

settings = get_settings()
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Paths
BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "static"


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Application lifespan context manager."""
    try:
        yield
    finally:
        try:
            await app.state.catalog.aclose()
        except Exception as e:
            logger.error(f"Error closing catalog client: {e}")


app = FastAPI(
    title="StreamIt",
    description="Look up a movie or series and stream it from embed providers",
    version="0.1.0",
    lifespan=app_lifespan,
)

# Mount static files
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# Shared services
app.state.catalog = CatalogClient(settings)
app.state.registry = build_registry(settings.enabled_providers)
app.state.sessions = SessionStore(
    maxsize=settings.max_sessions, ttl=settings.session_ttl
)

# Include routers
app.include_router(ui_router)
app.include_router(api_router, prefix="/api")
