"""Persistence collaborators for encounters, templates and the library."""

from __future__ import annotations

from combat_tracker.storage.base import BaseEncounterStore, BaseLibraryStore, BaseTemplateStore
from combat_tracker.storage.files import JsonEncounterStore, JsonLibraryStore, JsonTemplateStore


__all__ = [
    "BaseEncounterStore",
    "BaseTemplateStore",
    "BaseLibraryStore",
    "JsonEncounterStore",
    "JsonTemplateStore",
    "JsonLibraryStore",
]
