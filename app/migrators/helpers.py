import json
import re
from typing import Any, Dict, List, Optional

from .types import InstitutionsResponse, NewInstitution, Record

# Canonical 8-4-4-4-12 form, versions 1-8 with the RFC variant, plus the nil/max UUIDs
UUID_RE = re.compile(
    r"^(?:[0-9a-f]{8}-[0-9a-f]{4}-[1-8][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}"
    r"|00000000-0000-0000-0000-000000000000"
    r"|ffffffff-ffff-ffff-ffff-ffffffffffff)$",
    re.IGNORECASE,
)


def is_valid_uuid(value: Any) -> bool:
    """True if `value` is a syntactically valid UUID string."""
    return isinstance(value, str) and UUID_RE.match(value) is not None


def safe_parse(payload: Any) -> Record:
    """
    Parse a serialized questionnaire record.
    Anything that is not a JSON object (None, bad JSON, a list...) yields {}.
    """
    if not isinstance(payload, (str, bytes, bytearray)):
        return {}
    try:
        parsed = json.loads(payload)
    except (ValueError, TypeError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def merge_fields(base: Optional[Dict[str, Any]], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Field-by-field merge into a new dict.
    Every key defined on `overrides` wins, keys it lacks keep the `base` value.
    """
    merged = dict(base) if isinstance(base, dict) else {}
    for key, value in overrides.items():
        merged[key] = value
    return merged


def collect_contacts(data: Record) -> List[Dict[str, Any]]:
    """PI, primary contact and every additional contact that is actually present."""
    contacts = [data.get("pi"), data.get("primaryContact")]
    additional = data.get("additionalContacts")
    if isinstance(additional, list):
        contacts.extend(additional)
    return [c for c in contacts if isinstance(c, dict)]


def has_institution(contact: Dict[str, Any]) -> bool:
    return bool(contact.get("institution"))


def institution_id(inst: Dict[str, Any]) -> Any:
    # Directory entries coming straight from the API use "_id"
    return inst.get("id", inst.get("_id"))


def institutions_from(resp: Optional[InstitutionsResponse]) -> List[Dict[str, Any]]:
    institutions = (resp or {}).get("institutions") or []
    return [i for i in institutions if isinstance(i, dict)]


def find_new_institution(new_institutions: List[NewInstitution], inst_id: Any) -> Optional[NewInstitution]:
    return next((n for n in new_institutions or [] if n.get("id") == inst_id), None)


def find_section(data: Record, name: str) -> Optional[Dict[str, Any]]:
    sections = data.get("sections")
    if not isinstance(sections, list):
        return None
    return next((s for s in sections if isinstance(s, dict) and s.get("name") == name), None)
