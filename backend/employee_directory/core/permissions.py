"""Permission gate: boolean capability decisions for (action, resource, actor)."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from enum import Enum

from employee_directory.core.config import settings
from employee_directory.models.auth import Identity
from employee_directory.models.employee import CapabilityFlags

EMPLOYEE_LIST_RESOURCE = "Employee List"

PermissionCheck = Callable[[str, str, Identity], bool]


class Capability(str, Enum):
    EXPORT_PDF = "export_pdf"
    EXPORT_SPREADSHEET = "export_spreadsheet"
    EDIT_RECORD = "edit_record"


CAPABILITY_PRIVILEGES: dict[Capability, tuple[str, str]] = {
    Capability.EXPORT_PDF: ("EXPORT", EMPLOYEE_LIST_RESOURCE),
    Capability.EXPORT_SPREADSHEET: ("EXPORT", EMPLOYEE_LIST_RESOURCE),
    Capability.EDIT_RECORD: ("EDIT", EMPLOYEE_LIST_RESOURCE),
}


def has_privilege(
    action: str,
    resource: str,
    identity: Identity,
    grants: Mapping[str, Sequence[str]] | None = None,
) -> bool:
    if grants is None:
        grants = settings.ROLE_PRIVILEGES
    if not identity.role:
        return False
    return f"{action}:{resource}" in grants.get(identity.role, ())


def can(capability: Capability, identity: Identity, check: PermissionCheck = has_privilege) -> bool:
    action, resource = CAPABILITY_PRIVILEGES[capability]
    return check(action, resource, identity)


def capabilities(identity: Identity, check: PermissionCheck = has_privilege) -> CapabilityFlags:
    return CapabilityFlags(**{cap.value: can(cap, identity, check) for cap in Capability})
