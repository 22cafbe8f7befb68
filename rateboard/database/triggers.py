"""
Python side of the database triggers in supabase/migrations.

handle_new_user mirrors the on_auth_user_created trigger and
touch_updated_at mirrors update_updated_at_column. Services call them so
the API keeps the same guarantees when the migration is not installed.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from rateboard.core.policies import DEFAULT_ROLE

DEFAULT_PROFILE_NAME = "Unknown"
DEFAULT_PROFILE_ADDRESS = ""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def handle_new_user(
    user_id: str,
    email: Optional[str],
    user_metadata: Optional[Mapping[str, Any]] = None,
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Rows created for a freshly registered identity: (profile, user_role)."""
    metadata = user_metadata or {}
    name = metadata.get("name")
    address = metadata.get("address")
    profile = {
        "id": user_id,
        "name": name if name is not None else DEFAULT_PROFILE_NAME,
        "email": email or "",
        "address": address if address is not None else DEFAULT_PROFILE_ADDRESS,
    }
    user_role = {"user_id": user_id, "role": DEFAULT_ROLE.value}
    return profile, user_role


def touch_updated_at(values: Mapping[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Copy of an update payload with updated_at forced to the current time."""
    stamped = dict(values)
    stamped["updated_at"] = (now or utcnow()).isoformat()
    return stamped
