"""Health checks for the database and the task broker."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from celery import Celery
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def _timed(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def check_database_health(db: Session) -> ComponentHealth:
    """SELECT 1 against the configured database."""
    started = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(status=HealthStatus.UNHEALTHY, message="Database error")
    return ComponentHealth(status=HealthStatus.HEALTHY, message="Database connection OK", latency_ms=_timed(started))


def check_broker_health(app: Celery) -> ComponentHealth:
    """Open a broker connection. A broker outage only delays analysis, so it degrades."""
    started = time.perf_counter()
    try:
        with app.connection_for_write() as connection:
            connection.ensure_connection(max_retries=1)
    except Exception as e:
        logger.warning(f"Broker health check failed: {e}")
        return ComponentHealth(status=HealthStatus.DEGRADED, message="Broker unreachable")
    return ComponentHealth(status=HealthStatus.HEALTHY, message="Broker connection OK", latency_ms=_timed(started))


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Worst component status wins."""
    statuses = {component.status for component in components.values()}
    if HealthStatus.UNHEALTHY in statuses:
        return HealthStatus.UNHEALTHY
    if HealthStatus.DEGRADED in statuses:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY
