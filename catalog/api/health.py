from fastapi import APIRouter, Depends
from sqlalchemy import text

from catalog.database import engine
from catalog.utils.cache import ProductCache, get_cache

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "/",
    summary="Health check",
    description="Basic health check endpoint."
)
def health_check():
    """Simple health check."""
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if the database and the product cache are reachable."
)
def readiness_check(cache: ProductCache = Depends(get_cache)):
    checks = {
        "database": False,
        "cache": False
    }

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            checks["database"] = True
    except Exception as e:
        checks["database_error"] = str(e)

    checks["cache"] = cache.ping()

    all_healthy = checks["database"] and checks["cache"]

    return {
        "status": "ready" if all_healthy else "not_ready",
        "checks": checks
    }
