"""
Permission evaluation.

Permissions are "resource:action" strings. "resource:*" grants every action
on a resource and "*:*" grants everything.
"""

from typing import Iterable, List

from crm_service.domain.constants import SUPER_WILDCARD_PERMISSION
from crm_service.domain.entities import Permission
from crm_service.domain.value_objects import PermissionScope


def flatten_permissions(permissions: Iterable[Permission]) -> List[str]:
    """Union of permission keys across roles, sorted and de-duplicated."""
    return sorted({permission.key for permission in permissions})


def has_permission(permissions: Iterable[str], resource: str, action: str) -> bool:
    granted = set(permissions)
    return (
        f"{resource}:{action}" in granted
        or f"{resource}:*" in granted
        or SUPER_WILDCARD_PERMISSION in granted
    )


def compute_scope(permissions: Iterable[str], resource: str) -> PermissionScope:
    if has_permission(permissions, resource, "*"):
        return PermissionScope(can_access_all=True, filter_type="organization")
    return PermissionScope(can_access_all=False, filter_type="own")
