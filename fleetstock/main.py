import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from fleetstock.core.db import init_db, close_db
from fleetstock.api.v1.inventory import router as inventory_router
from fleetstock.api.v1.issuances import router as issuances_router
from fleetstock.api.v1.replacements import router as replacements_router
from fleetstock.core.config import PROJECT_NAME, VERSION
from fleetstock.core.exception_handlers import setup_exception_handlers

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("uvicorn")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db() # Connect to DB and generate schemas
    yield
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    # Configure API documentation and paths
    docs_url="/docs",
    redoc_url="/redoc"
)

# Include routers for modular API structure
app.include_router(inventory_router, prefix="/api/v1/inventory", tags=["Inventory Utilities"])
app.include_router(issuances_router, prefix="/api/v1/issuances", tags=["Inventory Issuance"])
app.include_router(replacements_router, prefix="/api/v1/replacements", tags=["Equipment Replacement"])


setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}
