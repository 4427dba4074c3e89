from copy import deepcopy

from app.settings import NOT_STARTED_STATUS, SECTION_A_NAME
from .base import MigrationStep
from .helpers import (
    collect_contacts,
    find_new_institution,
    find_section,
    has_institution,
    institution_id,
    institutions_from,
    is_valid_uuid,
    merge_fields,
    safe_parse,
)
from .types import MigratorDependencies, Record

NO_INSTITUTIONS_MSG = "No institutions found for migration"
GPA_FIELD = "nciGPA"


class MigrateLastApplication(MigrationStep):
    """
    Pre-fill the PI from the user's last submitted application.
    Only runs while Section A has not been started.
    """
    name = "migrate_last_app"

    async def migrate(self, data: Record, deps: MigratorDependencies) -> Record:
        section = find_section(data, SECTION_A_NAME)
        if section is not None and section.get("status") != NOT_STARTED_STATUS:
            return data

        resp = await deps.get_last_application()
        last_app = safe_parse((resp or {}).get("questionnaireData"))

        r = deepcopy(data)
        deps.logger.info("%s: Migrating last app %s %s", self.name, deepcopy(data), last_app)
        last_pi = last_app.get("pi")
        if isinstance(last_pi, dict):
            r["pi"] = merge_fields(r.get("pi"), last_pi)
        return r


class MigrateExistingInstitutions(MigrationStep):
    """
    Institutions created earlier in this session may have since been
    created in the directory under another ID. Point those contacts at
    the directory ID.
    """
    name = "migrate_existing_institutions"

    async def migrate(self, data: Record, deps: MigratorDependencies) -> Record:
        r = deepcopy(data)
        contacts = [c for c in collect_contacts(r)
                    if has_institution(c) and is_valid_uuid(c.get("institutionID"))]
        if not contacts:
            return data

        institutions = institutions_from(await deps.get_institutions())
        if not institutions:
            deps.logger.error("%s: %s", self.name, NO_INSTITUTIONS_MSG)
            return data

        for contact in contacts:
            current_id = contact.get("institutionID")
            new_inst = find_new_institution(deps.new_institutions, current_id)
            if new_inst is None:
                continue

            existing = next(
                (i for i in institutions
                 if i.get("name") == new_inst.get("name")
                 and institution_id(i) != current_id
                 and is_valid_uuid(institution_id(i))),
                None,
            )
            if existing is None:
                continue

            deps.logger.info("%s: Migrating to API ID %s %s", self.name, deepcopy(contact), existing)
            contact["institutionID"] = institution_id(existing)
        return r


class MigrateInstitutionsToID(MigrationStep):
    """Assign a directory ID to contacts that only carry an institution name."""
    name = "migrate_institutions_to_id"

    async def migrate(self, data: Record, deps: MigratorDependencies) -> Record:
        r = deepcopy(data)
        contacts = [c for c in collect_contacts(r)
                    if has_institution(c) and not is_valid_uuid(c.get("institutionID"))]
        if not contacts:
            return data

        institutions = institutions_from(await deps.get_institutions())
        if not institutions:
            deps.logger.error("%s: %s", self.name, NO_INSTITUTIONS_MSG)
            return data

        for contact in contacts:
            match = next((i for i in institutions if i.get("name") == contact["institution"]), None)
            if match is not None and is_valid_uuid(institution_id(match)):
                deps.logger.info("%s: Migrating institution %s %s", self.name, deepcopy(contact), match)
                contact["institutionID"] = institution_id(match)
                continue

            deps.logger.error("%s: Unable to find a matching institution %s", self.name, contact)
        return r


class MigrateInstitutionNames(MigrationStep):
    """Refresh stored institution names from the directory."""
    name = "migrate_institution_names"

    async def migrate(self, data: Record, deps: MigratorDependencies) -> Record:
        r = deepcopy(data)
        contacts = [c for c in collect_contacts(r)
                    if has_institution(c) and is_valid_uuid(c.get("institutionID"))]
        if not contacts:
            return data

        institutions = institutions_from(await deps.get_institutions())
        if not institutions:
            deps.logger.error("%s: %s", self.name, NO_INSTITUTIONS_MSG)
            return data

        for contact in contacts:
            current_id = contact["institutionID"]
            match = next((i for i in institutions if institution_id(i) == current_id), None)
            if match is None:
                # Created this session and not visible in the directory yet
                if find_new_institution(deps.new_institutions, current_id) is None:
                    deps.logger.error("%s: Unable to find a matching institution %s", self.name, contact)
                continue

            if match.get("name") and match["name"] != contact["institution"]:
                deps.logger.info("%s: Updating institution name %s %s", self.name, deepcopy(contact), match)
                contact["institution"] = match["name"]
        return r


class MigrateGPA(MigrationStep):
    """
    Move the deprecated per-funding `nciGPA` to `study.GPAName`.
    The first non-blank string wins; the field is stripped from every entry.
    """
    name = "migrate_gpa"

    async def migrate(self, data: Record, deps: MigratorDependencies) -> Record:
        study = data.get("study")
        funding = study.get("funding") if isinstance(study, dict) else None
        if not isinstance(funding, list):
            return data
        if not any(isinstance(f, dict) and GPA_FIELD in f for f in funding):
            return data

        r = deepcopy(data)
        study = r["study"]
        deps.logger.info("%s: Found outdated %s field %s", self.name, GPA_FIELD, deepcopy(study["funding"]))

        gpa_name = next(
            (f[GPA_FIELD].strip() for f in study["funding"]
             if isinstance(f, dict) and isinstance(f.get(GPA_FIELD), str) and f[GPA_FIELD].strip()),
            None,
        )
        if gpa_name is not None:
            study["GPAName"] = gpa_name
            deps.logger.info("%s: Migrating GPA to study level %s", self.name, gpa_name)
        else:
            study["GPAName"] = ""

        for f in study["funding"]:
            if isinstance(f, dict):
                f.pop(GPA_FIELD, None)
        return r
