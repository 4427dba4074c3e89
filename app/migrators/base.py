# app/migrators/base.py
from typing import Protocol
from .types import MigratorDependencies, Record

class MigrationStep(Protocol):
    async def migrate(self, data: Record, deps: MigratorDependencies) -> Record:
        """Return a NEW migrated record. Do not mutate `data`."""
        ...
