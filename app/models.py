from sqlalchemy import Column, String, Text, DateTime, func
from .db import Base

# -----------------------------
# ORM models (tables) for the questionnaire service
# -----------------------------
class Institution(Base):
    __tablename__ = "institutions"
    # The authoritative institution directory
    id     = Column(String, primary_key=True)                  # UUID string
    name   = Column(String, unique=True, index=True, nullable=False)
    status = Column(String, default="Active")                  # Active/Inactive

    def __repr__(self):
        return f"<Institution(id={self.id}, name={self.name}, status={self.status})>"


class Application(Base):
    __tablename__ = "applications"
    # A submission request and its serialized questionnaire
    id                 = Column(String, primary_key=True)      # UUID string
    applicant_id       = Column(String, index=True, nullable=False)
    status             = Column(String, default="New")         # New/In Progress/Submitted/...
    questionnaire_data = Column(Text)                          # JSON-serialized QuestionnaireData
    new_institutions   = Column(Text)                          # JSON list of {id, name}
    created_at         = Column(DateTime(timezone=True), server_default=func.now())
    updated_at         = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    submitted_date     = Column(DateTime(timezone=True))

    def __repr__(self):
        return f"<Application(id={self.id}, applicant_id={self.applicant_id}, status={self.status})>"
