"""Database models for Reflect."""

from .models import (
    Base,
    Collection,
    Draft,
    Entry,
    SettingEntry,
    User,
)

__all__ = [
    "Base",
    "Collection",
    "Draft",
    "Entry",
    "SettingEntry",
    "User",
]
