"""ID Generation.

ULID-based identifiers for outbound events. Prefixed (``act_*``) so
controller logs can tell event kinds apart; k-sortable so actions emitted
by one surface order by creation time.
"""

from datetime import datetime
from typing import NewType
from ulid import ULID

ActionID = NewType("ActionID", str)
"""Outbound user action identifier"""


class Prefix:
    """ID prefix constants."""

    ACTION = "act"


def new_action_id() -> ActionID:
    """Generate new action ID."""
    return ActionID(f"{Prefix.ACTION}_{ULID()}")


def _ulid_part(id_str: str) -> str:
    return id_str.split("_", 1)[1] if "_" in id_str else id_str


def is_valid(id_str: str) -> bool:
    """Check if string is a valid (optionally prefixed) ULID."""
    ulid_part = _ulid_part(id_str)
    if len(ulid_part) != 26:
        return False
    try:
        ULID.from_str(ulid_part)
        return True
    except ValueError:
        return False


def is_action_id(id_str: str) -> bool:
    """Check if ID is an action ID."""
    return id_str.startswith(f"{Prefix.ACTION}_") and is_valid(id_str)


def extract_timestamp(id_str: str) -> datetime | None:
    """Extract creation time from a ULID, or None if invalid."""
    try:
        return ULID.from_str(_ulid_part(id_str)).datetime
    except ValueError:
        return None
