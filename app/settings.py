# app/settings.py
import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./questionnaire.sqlite3")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Questionnaire section that holds the PI details
SECTION_A_NAME = "A"
NOT_STARTED_STATUS = "Not Started"
