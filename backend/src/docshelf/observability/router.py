"""Observability API endpoints: Prometheus metrics and health check."""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session

from ..database import get_db
from ..workers.celery_app import celery_app
from .health import HealthStatus, check_broker_health, check_database_health, get_overall_health

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/health", summary="Health check endpoint")
def health_check(db: Session = Depends(get_db)):
    """503 when the database is unreachable; a broker outage is reported as degraded."""
    components = {
        "database": check_database_health(db),
        "broker": check_broker_health(celery_app),
    }
    overall = get_overall_health(components)

    body = {
        "status": overall.value,
        "components": {
            name: {"status": c.status.value, "message": c.message, "latency_ms": c.latency_ms}
            for name, c in components.items()
        },
    }
    return JSONResponse(content=body, status_code=503 if overall == HealthStatus.UNHEALTHY else 200)
