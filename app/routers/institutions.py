from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db import get_db
from app.repositories import list_institutions, update_or_insert_institutions
from app.schemas import InstitutionIn

# --------------------------------------------------------------------
# Router setup
# --------------------------------------------------------------------
router = APIRouter(prefix="/institutions", tags=["institutions"])


@router.get("")
def get_institutions(db: Session = Depends(get_db)):
    """The whole institution directory, ordered by name."""
    return {"institutions": list_institutions(db)}


@router.post("")
def upsert_institutions(payload: List[InstitutionIn], db: Session = Depends(get_db)):
    """
    Bulk insert/update directory entries.

    Each record is upserted by id inside its own savepoint, so one bad
    record (duplicate name, malformed id) doesn't block the others.

    Returns:
        {
          "ok": True,
          "ingested": <count of successful rows>,
          "failed": <count of failed rows>,
          "errors": [ ... up to 10 sample errors ... ]
        }
    """
    if not payload:
        raise HTTPException(400, "Payload must be a non-empty JSON array")

    try:
        ok, errors = update_or_insert_institutions(db, [p.model_dump() for p in payload])
        db.commit()
    except Exception as e:
        db.rollback()
        raise HTTPException(500, f"Institution upsert failed: {e}")

    return {
        "ok": True,
        "ingested": ok,
        "failed": len(errors),
        "errors": errors[:10],  # limit size of error list
    }
