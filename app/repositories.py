import json
import logging
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, StatementError
from sqlalchemy.orm import Session
from app.models import Application, Institution
from app.migrators import is_valid_uuid, safe_parse
from app.migrators.types import InstitutionLookup, LastApplicationLookup

log = logging.getLogger(__name__)

# Statuses that count as "submitted" when looking for the user's last application
SUBMITTED_STATUSES = ("Submitted", "In Review", "Approved", "Rejected")
APPLICATION_STATUSES = ("New", "In Progress") + SUBMITTED_STATUSES


def _institution_to_dict(i: Institution) -> dict:
    return {"id": i.id, "name": i.name, "status": i.status}


def list_institutions(db: Session) -> list[dict]:
    rows = db.execute(select(Institution).order_by(Institution.name)).scalars().all()
    return [_institution_to_dict(i) for i in rows]


def update_or_insert_institutions(db: Session, records: list[dict]) -> tuple[int, list[dict]]:
    """
    Idempotent upsert by *id*. Records without an id get a fresh UUID.
    Names are unique in the directory; a clash is reported per record.
    """
    ok = 0
    errors: list[dict] = []

    for r in records:
        iid  = (r.get("id") or "").strip() or str(uuid4())
        name = (r.get("name") or "").strip()
        if not name:
            msg = "name is required"
            log.warning("institution record rejected: %s", msg)
            errors.append({"id": iid, "name": name, "error": msg})
            continue
        if not is_valid_uuid(iid):
            msg = "id must be a valid UUID"
            log.warning("institution record rejected: %s (id=%s)", msg, iid)
            errors.append({"id": iid, "name": name, "error": msg})
            continue

        try:
            # per-record savepoint so one bad record doesn’t poison the batch
            with db.begin_nested():
                row = db.get(Institution, iid)
                if row is None:
                    row = Institution(id=iid)
                row.name   = name
                row.status = r.get("status") or "Active"
                db.merge(row)
                db.flush()
            ok += 1
        except (IntegrityError, StatementError, TypeError, ValueError) as e:
            log.exception("institution upsert failed: id=%s name=%s", iid, name)
            errors.append({"id": iid, "name": name, "error": str(e)})

    return ok, errors


def application_to_dict(a: Application) -> dict:
    return {
        "_id": a.id,
        "applicantID": a.applicant_id,
        "status": a.status,
        "questionnaireData": safe_parse(a.questionnaire_data),
        "newInstitutions": _parse_new_institutions(a.new_institutions),
        "createdAt": a.created_at,
        "updatedAt": a.updated_at,
        "submittedDate": a.submitted_date,
    }


def _parse_new_institutions(raw: str | None) -> list[dict]:
    try:
        items = json.loads(raw) if raw else []
    except ValueError:
        log.warning("discarding malformed newInstitutions: %r", raw)
        return []
    if not isinstance(items, list):
        return []
    return [{"id": n.get("id"), "name": n.get("name")} for n in items if isinstance(n, dict)]


def get_application(db: Session, app_id: str) -> Application | None:
    return db.get(Application, app_id)


def save_application(
    db: Session,
    applicant_id: str,
    questionnaire_data: dict,
    app_id: str | None = None,
    status: str = "In Progress",
    new_institutions: list[dict] | None = None,
) -> Application:
    """Insert or update an application, serializing its questionnaire."""
    if status not in APPLICATION_STATUSES:
        raise ValueError(f"Unknown application status: {status}")

    row = db.get(Application, app_id) if app_id else None
    if row is None:
        row = Application(id=app_id or str(uuid4()), applicant_id=applicant_id)
        db.add(row)
    elif row.applicant_id != applicant_id:
        raise ValueError("Application belongs to another applicant")

    row.status             = status
    row.questionnaire_data = json.dumps(questionnaire_data)
    row.new_institutions   = json.dumps(new_institutions or [])
    if status == "Submitted":
        row.submitted_date = datetime.now(timezone.utc)
    db.flush()
    return row


def get_last_submitted_application(
    db: Session, applicant_id: str, exclude_id: str | None = None
) -> Application | None:
    """The applicant's most recently submitted application, if any."""
    stmt = (
        select(Application)
        .where(Application.applicant_id == applicant_id)
        .where(Application.status.in_(SUBMITTED_STATUSES))
        .order_by(Application.submitted_date.desc().nulls_last(), Application.updated_at.desc())
    )
    if exclude_id:
        stmt = stmt.where(Application.id != exclude_id)
    return db.execute(stmt).scalars().first()


# -------------------------------------------------------------------
# Lookups handed to the questionnaire migrator
# -------------------------------------------------------------------
def make_institution_lookup(db: Session) -> InstitutionLookup:
    async def _get_institutions():
        return {"institutions": list_institutions(db)}
    return _get_institutions


def make_last_application_lookup(
    db: Session, applicant_id: str, exclude_id: str | None = None
) -> LastApplicationLookup:
    async def _get_last_application():
        row = get_last_submitted_application(db, applicant_id, exclude_id=exclude_id)
        return {"questionnaireData": row.questionnaire_data if row else None}
    return _get_last_application
