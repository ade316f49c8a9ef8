"""RBAC enums.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from enum import IntEnum, IntFlag, StrEnum


class ProvisionMode(StrEnum):
    """Whether provisioning writes to the directory."""

    APPLY = "apply"
    DRY_RUN = "dry_run"


class AuditAction(StrEnum):
    """Action recorded in the audit note."""

    CREATED = "created"
    UPDATED = "updated"


class AceType(IntEnum):
    """ACE types handled by the normalizer (MS-DTYP 2.4.4.1)."""

    ACCESS_ALLOWED = 0x00
    ACCESS_DENIED = 0x01
    ACCESS_ALLOWED_OBJECT = 0x05
    ACCESS_DENIED_OBJECT = 0x06


class AceFlags(IntFlag):
    """ACE header flags."""

    OBJECT_INHERIT = 0x01
    CONTAINER_INHERIT = 0x02
    NO_PROPAGATE_INHERIT = 0x04
    INHERIT_ONLY = 0x08
    INHERITED = 0x10
    SUCCESSFUL_ACCESS = 0x40
    FAILED_ACCESS = 0x80


class AccessRights(IntFlag):
    """Directory service access mask bits."""

    CREATE_CHILD = 0x00000001
    DELETE_CHILD = 0x00000002
    LIST_CHILDREN = 0x00000004
    SELF = 0x00000008
    READ_PROPERTY = 0x00000010
    WRITE_PROPERTY = 0x00000020
    DELETE_TREE = 0x00000040
    LIST_OBJECT = 0x00000080
    CONTROL_ACCESS = 0x00000100
    DELETE = 0x00010000
    READ_CONTROL = 0x00020000
    WRITE_DAC = 0x00040000
    WRITE_OWNER = 0x00080000
    GENERIC_ALL = 0x10000000
    GENERIC_EXECUTE = 0x20000000
    GENERIC_WRITE = 0x40000000
    GENERIC_READ = 0x80000000


class AceScope(StrEnum):
    """Inheritance scope of a granted ACE."""

    NONE = "none"
    ALL = "all"
    DESCENDENTS = "descendents"
    SELF_AND_CHILDREN = "self_and_children"
    CHILDREN = "children"

    @property
    def ace_flags(self) -> AceFlags:
        """ACE header flags for the scope."""
        return _SCOPE_FLAGS[self]


_SCOPE_FLAGS: dict[AceScope, AceFlags] = {
    AceScope.NONE: AceFlags(0),
    AceScope.ALL: AceFlags.CONTAINER_INHERIT,
    AceScope.DESCENDENTS: AceFlags.CONTAINER_INHERIT | AceFlags.INHERIT_ONLY,
    AceScope.SELF_AND_CHILDREN: (
        AceFlags.CONTAINER_INHERIT | AceFlags.NO_PROPAGATE_INHERIT
    ),
    AceScope.CHILDREN: (
        AceFlags.CONTAINER_INHERIT
        | AceFlags.NO_PROPAGATE_INHERIT
        | AceFlags.INHERIT_ONLY
    ),
}
