"""
backend/app/database/enums.py

Enumerations

Defines enumerations used across the platform:
- UserRole: Account roles used for access control
- TeamRole: Role of a member inside a team
- ActivityType: Audited user actions
- EvaluationLevel: Level assigned to a scored evaluation
- CustomFieldType: Input kind of an extra property detail field
"""

from enum import Enum

# ---------------------------------------------------
# User Role Enumeration
# ---------------------------------------------------


class UserRole(str, Enum):
    """
    Enum representing account roles for access control.

    Values:
    - MEMBER: regular user, can run evaluations
    - OWNER: may manage the evaluation catalog
    - ADMIN: catalog management and bulk import
    - SUPERUSER: everything an admin can do
    """

    MEMBER = "MEMBER"
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    SUPERUSER = "SUPERUSER"


# ---------------------------------------------------
# Team Role Enumeration
# ---------------------------------------------------


class TeamRole(str, Enum):
    OWNER = "owner"
    MEMBER = "member"


# ---------------------------------------------------
# Activity Type Enumeration
# ---------------------------------------------------


class ActivityType(str, Enum):
    """
    Actions recorded in the activity log.
    """

    SIGN_UP = "SIGN_UP"
    SIGN_IN = "SIGN_IN"
    SIGN_OUT = "SIGN_OUT"
    UPDATE_ACCOUNT = "UPDATE_ACCOUNT"
    CREATE_TEAM = "CREATE_TEAM"
    EVALUATION_COMPLETED = "EVALUATION_COMPLETED"


# ---------------------------------------------------
# Evaluation Level Enumeration
# ---------------------------------------------------


class EvaluationLevel(str, Enum):
    NOVICE = "Novice"
    GOOD = "Good"
    EXPERT = "Expert"


# ---------------------------------------------------
# Custom Field Type Enumeration
# ---------------------------------------------------


class CustomFieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    TEXTAREA = "textarea"
    DATE = "date"
    BOOLEAN = "boolean"
