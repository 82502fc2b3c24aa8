"""Enums for model fields."""

from enum import Enum


class UserRole(str, Enum):
    """Account roles."""

    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    USER = "USER"


class StoryStatus(str, Enum):
    """Publication state of a story."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class ReadingStatus(str, Enum):
    """Reading progress states."""

    STARTED = "STARTED"
    COMPLETED = "COMPLETED"


class Language(str, Enum):
    """Language variants a story is published in."""

    EN = "en"
    TR = "tr"
