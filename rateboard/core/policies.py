"""
Row-level authorization for profiles, user_roles, stores and ratings.

The same rules are installed in the database as RLS policies
(supabase/migrations). The API talks to Supabase with the service role key,
which bypasses RLS, so every service filters and checks rows through this
module instead. Policy names match the SQL policy names one to one.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Tuple


class AppRole(str, Enum):
    SYSTEM_ADMIN = "system_admin"
    NORMAL_USER = "normal_user"
    STORE_OWNER = "store_owner"


# A user may hold several role rows (unique per (user_id, role) only).
# The effective role is the first one held in this order.
ROLE_PRECEDENCE: Tuple[AppRole, ...] = (
    AppRole.SYSTEM_ADMIN,
    AppRole.STORE_OWNER,
    AppRole.NORMAL_USER,
)

DEFAULT_ROLE = AppRole.NORMAL_USER


class Operation(str, Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


ALL_OPERATIONS = frozenset(Operation)


def _as_role(value: Any) -> Optional[AppRole]:
    try:
        return AppRole(value)
    except ValueError:
        return None


def roles_for(user_id: Optional[str], role_rows: Iterable[Dict[str, Any]]) -> FrozenSet[AppRole]:
    """Roles held by user_id in a user_roles snapshot. Unknown role values are ignored."""
    if not user_id:
        return frozenset()
    roles = set()
    for row in role_rows:
        if row.get("user_id") != user_id:
            continue
        role = _as_role(row.get("role"))
        if role is not None:
            roles.add(role)
    return frozenset(roles)


def has_role(user_id: Optional[str], role: AppRole, role_rows: Iterable[Dict[str, Any]]) -> bool:
    """True when a user_roles row matching (user_id, role) exists in the snapshot."""
    return AppRole(role) in roles_for(user_id, role_rows)


def resolve_role(roles: Iterable[AppRole]) -> Optional[AppRole]:
    held = set(roles)
    for role in ROLE_PRECEDENCE:
        if role in held:
            return role
    return None


def get_current_user_role(user_id: Optional[str], role_rows: Iterable[Dict[str, Any]]) -> Optional[AppRole]:
    """Effective role of user_id: highest precedence role held, None when the user has no role row."""
    return resolve_role(roles_for(user_id, role_rows))


@dataclass(frozen=True)
class Caller:
    """Identity a request runs as, with the roles loaded through the privileged accessor."""
    user_id: Optional[str]
    roles: FrozenSet[AppRole] = field(default_factory=frozenset)
    email: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def role(self) -> Optional[AppRole]:
        return resolve_role(self.roles)

    def has_role(self, role: AppRole) -> bool:
        return AppRole(role) in self.roles

    @property
    def is_admin(self) -> bool:
        return self.has_role(AppRole.SYSTEM_ADMIN)


ANONYMOUS = Caller(user_id=None)


class Policy(NamedTuple):
    name: str
    table: str
    operations: FrozenSet[Operation]
    check: Callable[[Caller, Dict[str, Any]], bool]


def _is_self(column: str) -> Callable[[Caller, Dict[str, Any]], bool]:
    def check(caller: Caller, row: Dict[str, Any]) -> bool:
        return caller.user_id is not None and row.get(column) == caller.user_id
    return check


def _is_admin(caller: Caller, row: Dict[str, Any]) -> bool:
    return caller.is_admin


def _always(caller: Caller, row: Dict[str, Any]) -> bool:
    return True


POLICIES: Tuple[Policy, ...] = (
    # profiles
    Policy("Users can view their own profile", "profiles", frozenset({Operation.SELECT}), _is_self("id")),
    Policy("Users can update their own profile", "profiles", frozenset({Operation.UPDATE}), _is_self("id")),
    Policy("System admins can view all profiles", "profiles", frozenset({Operation.SELECT}), _is_admin),
    Policy("System admins can insert profiles", "profiles", frozenset({Operation.INSERT}), _is_admin),
    Policy("System admins can update all profiles", "profiles", frozenset({Operation.UPDATE}), _is_admin),
    # user_roles
    Policy("Users can view their own roles", "user_roles", frozenset({Operation.SELECT}), _is_self("user_id")),
    Policy("System admins can view all roles", "user_roles", frozenset({Operation.SELECT}), _is_admin),
    Policy("System admins can manage all roles", "user_roles", ALL_OPERATIONS, _is_admin),
    # stores
    Policy("Everyone can view stores", "stores", frozenset({Operation.SELECT}), _always),
    Policy("Store owners can update their own store", "stores", frozenset({Operation.UPDATE}), _is_self("owner_id")),
    Policy("System admins can manage all stores", "stores", ALL_OPERATIONS, _is_admin),
    # ratings
    Policy("Users can view all ratings", "ratings", frozenset({Operation.SELECT}), _always),
    Policy("Users can insert their own ratings", "ratings", frozenset({Operation.INSERT}), _is_self("user_id")),
    Policy("Users can update their own ratings", "ratings", frozenset({Operation.UPDATE}), _is_self("user_id")),
    Policy("Users can delete their own ratings", "ratings", frozenset({Operation.DELETE}), _is_self("user_id")),
)


def policies_for(table: str, operation: Operation) -> List[Policy]:
    return [p for p in POLICIES if p.table == table and operation in p.operations]


def is_allowed(caller: Caller, table: str, operation: Operation, row: Dict[str, Any]) -> bool:
    """Permissive policies: the row passes when any policy for (table, operation) passes."""
    return any(policy.check(caller, row) for policy in policies_for(table, operation))


def visible_rows(caller: Caller, table: str, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [row for row in rows if is_allowed(caller, table, Operation.SELECT, row)]
