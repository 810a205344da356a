"""Rules and limits shared across the combat tracker."""

from __future__ import annotations

import re

# =============================================================================
# Death Saves
# =============================================================================

MAX_DEATH_SAVES = 3
"""Successes needed to stabilize, or failures that kill."""

DEATH_SAVE_SUCCESS_THRESHOLD = 10
"""A d20 roll at or above this value counts as a success."""

NATURAL_20 = 20
"""Natural 20 on a death save: the combatant wakes up at 1 HP."""

NATURAL_1 = 1
"""Natural 1 on a death save counts as two failures."""

CRITICAL_FAIL_FAILURES = 2
"""Failures recorded for a natural 1."""

REVIVE_HP = 1
"""Hit points restored by a natural 20 death save."""

# =============================================================================
# Concentration
# =============================================================================

CONCENTRATION_MIN_DC = 10
"""Floor for the constitution save DC after taking damage."""

# =============================================================================
# Action Log
# =============================================================================

MAX_LOG_ENTRIES = 200
"""Number of action log entries retained; the oldest are evicted first."""

# =============================================================================
# Persistence
# =============================================================================

RECORD_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+\Z")
"""Allowed characters for encounter filenames and library names."""

RECORD_SUFFIX = ".json"
"""File suffix for stored encounters and library entries."""


def is_record_name_char(char: str) -> bool:
    """Return True if ``char`` may appear in a stored record name."""
    return char.isascii() and (char.isalnum() or char in "_-")


__all__ = [
    "MAX_DEATH_SAVES",
    "DEATH_SAVE_SUCCESS_THRESHOLD",
    "NATURAL_20",
    "NATURAL_1",
    "CRITICAL_FAIL_FAILURES",
    "REVIVE_HP",
    "CONCENTRATION_MIN_DC",
    "MAX_LOG_ENTRIES",
    "RECORD_NAME_PATTERN",
    "RECORD_SUFFIX",
    "is_record_name_char",
]
