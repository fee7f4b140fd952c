"""
Health check endpoint. Needs no token.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.config import get_settings
from backoffice.models.base import get_db
from backoffice.models.kv_entry import KVEntry
from backoffice.services.email_service import EmailSender

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Report whether the key-value table can be read.

    Email delivery is reported separately: an unconfigured sender
    does not make the service unhealthy, but password recovery
    will not work.
    """
    settings = get_settings()
    try:
        db.execute(select(KVEntry.key).limit(1))
        db_status = "healthy"
    except SQLAlchemyError as e:
        logger.error("Health check could not read kv_store: %s", e)
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "deposit-backoffice",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": db_status,
        "email": "configured" if EmailSender(settings).configured else "not configured",
    }
