"""
Grant Role Script
Replaces a user's role, looked up by profile email. Uses the service role
key, so it is the way to create the first system_admin.

Usage:
  python rateboard/scripts/grant_role.py --email admin@example.com --role system_admin
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from rateboard.core.policies import AppRole
from rateboard.database.supabase_client import SupabaseClient
from rateboard.modules.profiles.service import ProfileService
from rateboard.modules.user_roles.service import UserRoleService
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def grant_role(supabase: Client, email: str, role: AppRole) -> bool:
    """Set the role of the user whose profile has this email. False when no such user exists."""
    profile = ProfileService(supabase).find_by_email(email)
    if not profile:
        logger.error(f"User not found: {email}")
        return False
    rows = UserRoleService(supabase).assign_role(profile["id"], role)
    logger.info(f"{email} now has role(s): {', '.join(r.role.value for r in rows)}")
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Assign a role to a user")
    parser.add_argument("--email", required=True, help="Profile email of the user")
    parser.add_argument(
        "--role",
        default=AppRole.SYSTEM_ADMIN.value,
        choices=[r.value for r in AppRole],
        help="Role to assign (default: system_admin)"
    )
    args = parser.parse_args(argv)

    if not SupabaseClient.has_service_client():
        logger.error("SUPABASE_SERVICE_ROLE_KEY must be set to manage roles")
        return 1

    ok = grant_role(SupabaseClient.get_service_client(), args.email, AppRole(args.role))
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
