"""
RBAC (Role-Based Access Control) permission system

The role matrix is built once at import time into an immutable mapping and
handed to checks explicitly; nothing mutates it at runtime.
"""

from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping


class Permission(str, Enum):
    """Permission definitions"""
    # Appointment permissions
    APPOINTMENT_CREATE = "appointment:create"
    APPOINTMENT_MODIFY = "appointment:modify"
    APPOINTMENT_CANCEL = "appointment:cancel"
    APPOINTMENT_VIEW = "appointment:view"

    # Client permissions
    CLIENT_CREATE = "client:create"
    CLIENT_MODIFY = "client:modify"
    CLIENT_DELETE = "client:delete"

    # Service catalog permissions
    SERVICE_CREATE = "service:create"
    SERVICE_MODIFY = "service:modify"
    SERVICE_DELETE = "service:delete"

    # Business configuration
    SCHEDULE_MANAGE = "schedule:manage"
    BUSINESS_CONFIGURE = "business:configure"
    PLAN_CHANGE = "plan:change"

    # Staff
    USER_INVITE = "user:invite"
    USER_CHANGE_ROLE = "user:change_role"
    USER_DEACTIVATE = "user:deactivate"

    # Reports and dashboard
    REPORTS_VIEW = "reports:view"
    REPORTS_DOWNLOAD = "reports:download"
    DASHBOARD_VIEW = "dashboard:view"


_OPERATIONAL = frozenset({
    Permission.APPOINTMENT_CREATE,
    Permission.APPOINTMENT_MODIFY,
    Permission.APPOINTMENT_CANCEL,
    Permission.APPOINTMENT_VIEW,
    Permission.CLIENT_CREATE,
    Permission.CLIENT_MODIFY,
    Permission.DASHBOARD_VIEW,
})

_ADMIN = _OPERATIONAL | frozenset({
    Permission.CLIENT_DELETE,
    Permission.SERVICE_CREATE,
    Permission.SERVICE_MODIFY,
    Permission.SERVICE_DELETE,
    Permission.SCHEDULE_MANAGE,
    Permission.BUSINESS_CONFIGURE,
    Permission.USER_INVITE,
    Permission.USER_CHANGE_ROLE,
    Permission.USER_DEACTIVATE,
    Permission.REPORTS_VIEW,
    Permission.REPORTS_DOWNLOAD,
})


def build_role_permissions() -> Mapping[str, FrozenSet[Permission]]:
    """Build the read-only role -> permissions matrix"""
    return MappingProxyType({
        # Owners have every permission
        "owner": frozenset(Permission),
        # Admins everything except changing the plan
        "admin": _ADMIN,
        # Employees run the calendar and can see reports
        "empleado": _OPERATIONAL | {Permission.REPORTS_VIEW},
        # Front desk books and edits clients only
        "recepcionista": _OPERATIONAL,
    })


ROLE_PERMISSIONS = build_role_permissions()


def get_permissions_for_role(
    role: str,
    matrix: Mapping[str, FrozenSet[Permission]] = ROLE_PERMISSIONS,
) -> FrozenSet[Permission]:
    """Get permissions for a given role"""
    if not role:
        return frozenset()
    return matrix.get(role.lower(), frozenset())


def has_permission(required_permission: Permission, user_permissions: FrozenSet[Permission]) -> bool:
    """Check if user has required permission"""
    return required_permission in user_permissions
