import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.crud import RecordNotFoundError

router = APIRouter(prefix="/utils", tags=["utils"])
logger = logging.getLogger(__name__)


@router.get("/health-check/")
async def health_check() -> bool:
    return True


def storage_failure(session: Session, action: str, exc: SQLAlchemyError) -> HTTPException:
    """Roll back, log with context and build the generic 500 for `action`."""
    try:
        session.rollback()
    except SQLAlchemyError as rollback_exc:
        logger.warning("Session rollback failed: %s", rollback_exc)
    logger.error("Storage failure while trying to %s: %s", action, exc)
    return HTTPException(status_code=500, detail=f"Failed to {action}")


def not_found(exc: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{exc.entity} not found")
