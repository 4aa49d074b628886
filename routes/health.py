from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from database import check_db

router = APIRouter(prefix="/health", tags=["health"])

@router.get("", status_code=status.HTTP_200_OK)
def health_check():
    """Liveness probe. Returns 200 if the process is up."""
    return {"status": "healthy"}

@router.get("/ready")
def readiness_check():
    """Readiness probe, including database connectivity."""
    if not check_db():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
