import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from crumbs.core.db import init_db, close_db
from crumbs.api.v1.inventory import router as inventory_router
from crumbs.api.v1.recipes import router as recipes_router
from crumbs.api.v1.production import router as production_router
from crumbs.api.v1.settings import router as settings_router
from crumbs.api.v1.admin import router as admin_router
from crumbs.api.v1.ai import router as ai_router
from crumbs.core.config import LOG_LEVEL, PROJECT_NAME, VERSION
from crumbs.core.exception_handlers import setup_exception_handlers
from crumbs.integrations.identity import close_identity_client
from crumbs.integrations.suggestions import close_suggestion_client

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("crumbs")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db() # Connect to DB and generate schemas
    yield
    await close_identity_client()
    await close_suggestion_client()
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Tenant routes (business users)
app.include_router(inventory_router, prefix="/api/v1/inventory", tags=["Inventory"])
app.include_router(recipes_router, prefix="/api/v1/recipes", tags=["Recipes"])
app.include_router(production_router, prefix="/api/v1/production", tags=["Production"])
app.include_router(settings_router, prefix="/api/v1/settings", tags=["Settings"])
app.include_router(ai_router, prefix="/api/v1/ai", tags=["AI Suggestions"])
# Admin routes
app.include_router(admin_router, prefix="/api/v1/admin", tags=["Admin"])


setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}
