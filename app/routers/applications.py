import logging
from typing import Any, Dict, List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db import get_db
from app.migrators import MigratorDependencies, QuestionnaireDataMigrator
from app.repositories import (
    application_to_dict,
    get_application,
    make_institution_lookup,
    make_last_application_lookup,
    save_application,
)
from app.schemas import ApplicationIn, MigrateRequest

log = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


async def _migrate(
    db: Session,
    data: Dict[str, Any],
    applicant_id: str,
    app_id: str | None,
    new_institutions: List[Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Run the questionnaire migrator against the database-backed lookups.
    Data problems never raise; a failing lookup is reported as a 502.
    """
    deps = MigratorDependencies(
        get_institutions=make_institution_lookup(db),
        get_last_application=make_last_application_lookup(db, applicant_id, exclude_id=app_id),
        new_institutions=new_institutions,
    )
    try:
        return await QuestionnaireDataMigrator(data, deps).run()
    except Exception as e:
        log.exception("questionnaire migration failed: application_id=%s", app_id)
        raise HTTPException(502, f"Migration failed: {e}")


@router.post("")
def create_or_update_application(payload: ApplicationIn, db: Session = Depends(get_db)):
    """Save an application with its (already migrated) questionnaire data."""
    try:
        row = save_application(
            db,
            applicant_id=payload.applicantID,
            questionnaire_data=payload.questionnaireData,
            app_id=payload.id,
            status=payload.status,
            new_institutions=[n.model_dump() for n in payload.newInstitutions],
        )
        db.commit()
    except ValueError as e:
        db.rollback()
        raise HTTPException(400, str(e))
    return application_to_dict(row)


@router.post("/migrate")
async def migrate_questionnaire_data(payload: MigrateRequest, db: Session = Depends(get_db)):
    """Upgrade a questionnaire record supplied by the caller. Nothing is persisted."""
    migrated = await _migrate(
        db,
        payload.questionnaireData,
        applicant_id=payload.applicantID,
        app_id=payload.applicationID,
        new_institutions=[n.model_dump() for n in payload.newInstitutions],
    )
    return {"questionnaireData": migrated}


@router.get("/{app_id}")
async def get_migrated_application(app_id: str, db: Session = Depends(get_db)):
    """
    Load an application and upgrade its questionnaire before it is shown.
    The stored copy is left as-is until the client saves it back.
    """
    row = get_application(db, app_id)
    if row is None:
        raise HTTPException(404, "Application not found")

    item = application_to_dict(row)
    item["questionnaireData"] = await _migrate(
        db,
        item["questionnaireData"],
        applicant_id=row.applicant_id,
        app_id=row.id,
        new_institutions=item["newInstitutions"],
    )
    return item
