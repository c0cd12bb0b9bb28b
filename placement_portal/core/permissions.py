"""
Permission Policy Table - role -> resource -> allowed actions.

Actions carry an optional scope suffix:
- no suffix: unrestricted within the resource
- `_dept`: limited to the actor's department
- `_own`: limited to rows the actor owns or created
- `_eligible`: limited to rows the actor is eligible for (students and jobs)

One `PermissionPolicy` is built in `create_app()` and kept on `app.state`.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

SCOPE_ALL = "all"
SCOPE_DEPT = "dept"
SCOPE_OWN = "own"
SCOPE_ELIGIBLE = "eligible"

# Checked in this order: the broadest grant a role holds wins.
_SCOPE_SUFFIXES: Tuple[Tuple[str, str], ...] = (
    ("", SCOPE_ALL),
    ("_dept", SCOPE_DEPT),
    ("_own", SCOPE_OWN),
    ("_eligible", SCOPE_ELIGIBLE),
)

DEFAULT_GRANTS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "admin": {
        "users": ("create", "read", "update", "delete"),
        "companies": ("create", "read", "update", "delete", "approve"),
        "jobs": ("create", "read", "update", "delete", "approve"),
        "applications": ("read", "update", "shortlist"),
        "interviews": ("create", "read", "update", "delete"),
        "announcements": ("create", "read", "update", "delete"),
        "analytics": ("read",),
        "reports": ("export",),
        "students": ("read", "update", "approve"),
        "departments": ("create", "read"),
    },
    "dept_officer": {
        "users": ("create_dept", "read_dept", "update_dept"),
        "companies": ("create", "read", "update", "approve_dept"),
        "jobs": ("create", "read", "update_dept", "approve_dept"),
        "applications": ("read_dept", "update_dept", "shortlist_dept"),
        "interviews": ("create_dept", "read_dept", "update_dept", "delete_dept"),
        "announcements": ("create_dept", "read", "update_own", "delete_own"),
        "analytics": ("read_dept",),
        "reports": ("export_dept",),
        "students": ("read_dept", "approve_dept"),
        "departments": ("read",),
    },
    "coordinator": {
        "companies": ("create", "read", "update"),
        "jobs": ("create", "read", "update_own"),
        "applications": ("read_dept", "shortlist_dept"),
        "interviews": ("create_dept", "read_dept", "update_dept"),
        "announcements": ("create_dept", "read", "update_own", "delete_own"),
        "analytics": ("read_dept",),
        "students": ("read_dept",),
        "departments": ("read",),
    },
    "student": {
        "jobs": ("read_eligible",),
        "applications": ("create", "read_own", "withdraw_own"),
        "interviews": ("read_own",),
        "announcements": ("read",),
        "analytics": ("read_own",),
        "students": ("read_own", "update_own"),
        "departments": ("read",),
    },
}


@dataclass(frozen=True)
class PermissionPolicy:
    grants: Mapping[str, Mapping[str, FrozenSet[str]]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, table: Mapping[str, Mapping[str, Tuple[str, ...]]]) -> "PermissionPolicy":
        return cls(grants={
            role: {resource: frozenset(actions) for resource, actions in resources.items()}
            for role, resources in table.items()
        })

    @classmethod
    def default(cls) -> "PermissionPolicy":
        return cls.from_mapping(DEFAULT_GRANTS)

    def has_permission(self, role: str, resource: str, action: str) -> bool:
        """Exact lookup. Unknown role or resource denies."""
        role_grants = self.grants.get(_value(role))
        if not role_grants:
            return False
        return action in role_grants.get(resource, frozenset())

    def resolve_scope(self, role: str, resource: str, action: str) -> Optional[str]:
        """
        Broadest scope under which `role` may perform `action` on `resource`.

        `resolve_scope("coordinator", "jobs", "update")` is `"own"` because the
        coordinator only holds `update_own`. Returns None when nothing matches.
        """
        for suffix, scope in _SCOPE_SUFFIXES:
            if self.has_permission(role, resource, action + suffix):
                return scope
        return None

    def permissions_for(self, role: str) -> Dict[str, list]:
        role_grants = self.grants.get(_value(role), {})
        return {resource: sorted(actions) for resource, actions in role_grants.items()}


def _value(role) -> str:
    return getattr(role, "value", role)
