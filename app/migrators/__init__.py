from .pipeline import get_default_steps, migrate_questionnaire, QuestionnaireDataMigrator
from .steps import (
    MigrateExistingInstitutions,
    MigrateGPA,
    MigrateInstitutionNames,
    MigrateInstitutionsToID,
    MigrateLastApplication,
    NO_INSTITUTIONS_MSG,
)
from .helpers import collect_contacts, is_valid_uuid, merge_fields, safe_parse
from .types import MigratorDependencies, NewInstitution, Record
from .base import MigrationStep

__all__ = [
    "get_default_steps",
    "migrate_questionnaire",
    "QuestionnaireDataMigrator",
    "MigrateExistingInstitutions",
    "MigrateGPA",
    "MigrateInstitutionNames",
    "MigrateInstitutionsToID",
    "MigrateLastApplication",
    "NO_INSTITUTIONS_MSG",
    "collect_contacts",
    "is_valid_uuid",
    "merge_fields",
    "safe_parse",
    "MigratorDependencies",
    "NewInstitution",
    "Record",
    "MigrationStep",
]
