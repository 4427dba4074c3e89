# app/schemas.py
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

ApplicationStatus = Literal["New", "In Progress", "Submitted", "In Review", "Approved", "Rejected"]


class InstitutionIn(BaseModel):
    id: Optional[str] = None           # generated when omitted
    name: str
    status: Literal["Active", "Inactive"] = "Active"


class NewInstitutionIn(BaseModel):
    id: str
    name: str


class ApplicationIn(BaseModel):
    id: Optional[str] = Field(default=None, alias="_id")
    applicantID: str
    status: ApplicationStatus = "In Progress"
    questionnaireData: Dict[str, Any] = {}
    newInstitutions: List[NewInstitutionIn] = []


class MigrateRequest(BaseModel):
    applicantID: str                   # whose last submission backfills the PI
    applicationID: Optional[str] = None  # excluded from the last-submission lookup
    questionnaireData: Dict[str, Any] = {}
    newInstitutions: List[NewInstitutionIn] = []
