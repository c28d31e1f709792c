import os
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, func, select
from loguru import logger

from textile_inventory.core.config import settings
from textile_inventory.db.core import get_session
from textile_inventory.db.schema import RawMaterial

router = APIRouter()


@router.get("/", status_code=status.HTTP_200_OK)
def index():
    return {"status": "API is running"}


@router.get("/readiness", status_code=status.HTTP_200_OK)
def readiness_check(session: Session = Depends(get_session)):
    """
    Verifies the inventory table answers and the image directory is writable.
    """
    try:
        materials = session.exec(select(func.count()).select_from(RawMaterial)).one()
    except Exception:
        logger.exception("Database readiness check failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not ready"
        )

    storage = "online" if os.access(settings.static_dir, os.W_OK) else "read-only"
    if storage != "online":
        logger.warning(f"Static directory {settings.static_dir} is not writable")

    return {
        "status": "ready",
        "database": "online",
        "storage": storage,
        "materials": materials,
    }
