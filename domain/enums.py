"""
Domain enums for MealLog application.
Contains all enumeration types used across the domain models.
"""

import enum


class UserRole(str, enum.Enum):
    """Account roles"""

    USER = "user"
    ADMIN = "admin"


class Visibility(str, enum.Enum):
    """Who may see a meal"""

    PRIVATE = "private"
    MEMBER = "member"
    ALL = "all"
