"""Domain package exports for value objects and pure session rules."""

from .entities import (
    DocumentReference,
    EntitlementVerdict,
    Session,
    UnsavedChoice,
    UsageRecord,
    UserIdentity,
    VerdictSource,
    ViewCommand,
    ViewMode,
)
from .launch_args import resolve_document
from .menu import MenuLayout, menu_for_mode
from .trial_day import logical_day, logical_day_key, logical_day_start

__all__ = [
    "DocumentReference",
    "EntitlementVerdict",
    "MenuLayout",
    "Session",
    "UnsavedChoice",
    "UsageRecord",
    "UserIdentity",
    "VerdictSource",
    "ViewCommand",
    "ViewMode",
    "logical_day",
    "logical_day_key",
    "logical_day_start",
    "menu_for_mode",
    "resolve_document",
]
