from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime

from venue_pricing.database.connection import get_db
from venue_pricing.schemas.system import HealthCheckResponse

router = APIRouter(tags=["System"])


@router.get("/health", response_model=HealthCheckResponse)
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Lightweight public health check.
    Returns ok + DB connectivity check (SELECT 1).
    """
    now = datetime.utcnow()
    start_time = getattr(request.app.state, "start_time", now)
    uptime_seconds = (now - start_time).total_seconds()

    db_ok = True
    extra = {}
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        db_ok = False
        extra["db_error"] = str(e)

    return HealthCheckResponse(
        status="ok" if db_ok else "degraded",
        now=now,
        uptime_seconds=uptime_seconds,
        db_ok=db_ok,
        extra=extra or None,
    )
