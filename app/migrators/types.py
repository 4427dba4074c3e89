# app/migrators/types.py
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, TypedDict

# A questionnaire record as persisted: plain JSON-shaped dict
Record = Dict[str, Any]


class NewInstitution(TypedDict):
    """An institution created during the current editing session."""
    id: str
    name: str


class InstitutionsResponse(TypedDict, total=False):
    institutions: Optional[List[Dict[str, Any]]]


class LastApplicationResponse(TypedDict, total=False):
    questionnaireData: Optional[str]


InstitutionLookup = Callable[[], Awaitable[Optional[InstitutionsResponse]]]
LastApplicationLookup = Callable[[], Awaitable[Optional[LastApplicationResponse]]]


class MigrationLogger(Protocol):
    def info(self, msg: str, *args: Any) -> None: ...
    def error(self, msg: str, *args: Any) -> None: ...


@dataclass
class MigratorDependencies:
    """Everything a migration step may reach outside of the record itself."""
    get_institutions: InstitutionLookup
    get_last_application: LastApplicationLookup
    new_institutions: List[NewInstitution] = field(default_factory=list)
    logger: MigrationLogger = field(default_factory=lambda: logging.getLogger("app.migrators"))
