from placement_portal.core.constants import UserRole
from placement_portal.core.permissions import (
    SCOPE_ALL, SCOPE_DEPT, SCOPE_ELIGIBLE, SCOPE_OWN, PermissionPolicy
)


def test_admin_holds_unrestricted_grants() -> None:
    policy = PermissionPolicy.default()
    assert policy.resolve_scope(UserRole.admin, "jobs", "approve") == SCOPE_ALL
    assert policy.resolve_scope(UserRole.admin, "reports", "export") == SCOPE_ALL


def test_scope_suffixes_resolve_to_the_granted_scope() -> None:
    policy = PermissionPolicy.default()
    assert policy.resolve_scope(UserRole.coordinator, "jobs", "update") == SCOPE_OWN
    assert policy.resolve_scope(UserRole.dept_officer, "applications", "read") == SCOPE_DEPT
    assert policy.resolve_scope(UserRole.student, "jobs", "read") == SCOPE_ELIGIBLE
    assert policy.resolve_scope(UserRole.student, "applications", "withdraw") == SCOPE_OWN


def test_missing_grant_resolves_to_none() -> None:
    policy = PermissionPolicy.default()
    assert policy.resolve_scope(UserRole.student, "companies", "read") is None
    assert policy.resolve_scope(UserRole.coordinator, "applications", "update") is None
    assert policy.resolve_scope(UserRole.coordinator, "reports", "export") is None


def test_unknown_role_or_resource_denies() -> None:
    policy = PermissionPolicy.default()
    assert not policy.has_permission("guest", "jobs", "read")
    assert not policy.has_permission(UserRole.admin, "payroll", "read")


def test_has_permission_is_an_exact_lookup() -> None:
    policy = PermissionPolicy.default()
    assert policy.has_permission("dept_officer", "applications", "update_dept")
    assert not policy.has_permission("dept_officer", "applications", "update")


def test_custom_policy_table() -> None:
    policy = PermissionPolicy.from_mapping({"student": {"jobs": ("read",)}})
    assert policy.resolve_scope("student", "jobs", "read") == SCOPE_ALL
    assert policy.resolve_scope("admin", "jobs", "read") is None


def test_permissions_for_lists_sorted_actions() -> None:
    permissions = PermissionPolicy.default().permissions_for(UserRole.student)
    assert permissions["applications"] == ["create", "read_own", "withdraw_own"]
    assert "companies" not in permissions
