from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

import uvicorn

from catalog.config import get_settings
from catalog.database import engine, Base
from catalog.api import products, health
from catalog.exceptions import CatalogError, catalog_exception_handler, generic_exception_handler

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up product catalog service...")

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    yield

    logger.info("Shutting down product catalog service...")


app = FastAPI(
    title="Product Catalog Service",
    description="""
    CRUD microservice for the product catalog:

    - **Browsing**: Paginated, sorted listing of active products, search and categories
    - **Management**: Create, fully update and soft-delete products
    - **Stock**: Signed stock adjustments that never take stock below zero
    - **Caching**: Read-through cache for product lookups by ID

    ## Stock adjustments
    A stock change is applied with a single conditional UPDATE, so concurrent
    adjustments of the same product cannot lose each other's writes.

    ## Soft delete
    Deleted products are hidden from listing, search and category browsing,
    but remain retrievable by ID.
    """,
    version="1.0.0",
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT"
    },
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(CatalogError, catalog_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(health.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": "Product Catalog Service",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/api/v1/health"
    }


def run():
    """Serve the API with uvicorn (``catalog-service`` console script)."""
    uvicorn.run("catalog.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
