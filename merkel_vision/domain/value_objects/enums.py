"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class FormMode(str, Enum):
    CLOSED = "closed"
    CREATING_NEW = "creating_new"
    EDITING_EXISTING = "editing_existing"


class SortField(str, Enum):
    NAME = "name"
    DATE_CREATED = "dateCreated"
    DATE_UPDATED = "dateUpdated"


class MarkerKind(str, Enum):
    LEGACY = "legacy"
    ADVANCED = "advanced"


class AttachStatus(str, Enum):
    ATTACHED = "attached"
    ALREADY_ATTACHED = "already_attached"
    FAILED = "failed"
