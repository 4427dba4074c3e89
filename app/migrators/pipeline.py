from copy import deepcopy
from typing import List, Optional
from .base import MigrationStep
from .types import MigratorDependencies, Record
from .steps import (
    MigrateExistingInstitutions,
    MigrateGPA,
    MigrateInstitutionNames,
    MigrateInstitutionsToID,
    MigrateLastApplication,
)


def get_default_steps() -> List[MigrationStep]:
    """
    The migration steps in the order they must run.
    Existing-institution dedup runs before name->ID resolution so a
    session-created ID is swapped for the directory ID first, and
    name->ID resolution runs before the name refresh, which only
    looks at contacts that already carry an ID.
    """
    return [
        MigrateLastApplication(),
        MigrateExistingInstitutions(),
        MigrateInstitutionsToID(),
        MigrateInstitutionNames(),
        MigrateGPA(),
    ]


class QuestionnaireDataMigrator:
    """
    Upgrades a persisted questionnaire record to the current shape.
    Each step takes the output of the previous one; the caller's
    record is never touched.
    """
    def __init__(
        self,
        data: Record,
        dependencies: MigratorDependencies,
        steps: Optional[List[MigrationStep]] = None,
    ):
        self._data = deepcopy(data)  # Don't mutate the input
        self._dependencies = dependencies
        self.steps = steps if steps is not None else get_default_steps()

    async def run(self) -> Record:
        """Run every step in order and return the migrated record."""
        for step in self.steps:
            self._data = await step.migrate(self._data, self._dependencies)
        return self._data

    def get_data(self) -> Record:
        """The record as it currently stands, without running any step."""
        return self._data

    def get_dependencies(self) -> MigratorDependencies:
        return self._dependencies


async def migrate_questionnaire(data: Record, dependencies: MigratorDependencies) -> Record:
    """Convenience wrapper for a one-shot migration."""
    return await QuestionnaireDataMigrator(data, dependencies).run()
