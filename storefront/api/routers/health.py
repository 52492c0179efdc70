# storefront/api/routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from storefront.api.deps import get_lock_service
from storefront.data.database import get_db
from storefront.services.lock_service import LockService
from storefront.utils.settings import SERVICE_NAME
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health():
    """Liveness, no dependencies touched."""
    return {"status": "pass", "service": SERVICE_NAME, "timestamp": _now()}


@router.get("/health/ready")
def readiness(db: Session = Depends(get_db), lock_service: LockService = Depends(get_lock_service)):
    """
    Readiness: database is required, redis only degrades checkout so it
    reports "warn".
    """
    checks = {}

    try:
        db.execute(text("SELECT 1"))
        checks["database:connectivity"] = {"status": "pass", "time": _now()}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        checks["database:connectivity"] = {"status": "fail", "output": str(e), "time": _now()}

    try:
        lock_service.ping()
        checks["cache:connectivity"] = {"status": "pass", "time": _now()}
    except Exception as e:
        checks["cache:connectivity"] = {"status": "warn", "output": str(e), "time": _now()}

    statuses = [c["status"] for c in checks.values()]
    if "fail" in statuses:
        overall = "fail"
    elif "warn" in statuses:
        overall = "warn"
    else:
        overall = "pass"

    code = status.HTTP_503_SERVICE_UNAVAILABLE if overall == "fail" else status.HTTP_200_OK
    return JSONResponse(
        status_code=code,
        content={"status": overall, "service": SERVICE_NAME, "checks": checks, "timestamp": _now()},
    )
