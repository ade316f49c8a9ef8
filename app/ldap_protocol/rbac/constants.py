"""RBAC constants.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from enum import StrEnum

from .enums import AccessRights


class TrusteeNames(StrEnum):
    """Well-known administrative groups granted full control."""

    ENTERPRISE_ADMINS = "Enterprise Admins"
    DOMAIN_ADMINS = "Domain Admins"


GROUP_OBJECT_CLASS = "group"
GROUP_OBJECT_CLASSES = ["top", "group"]

# ADS_GROUP_TYPE_GLOBAL_GROUP | ADS_GROUP_TYPE_SECURITY_ENABLED
GLOBAL_SECURITY_GROUP_TYPE = -2147483646

AUDIT_NOTE_ATTRIBUTE = "info"
AUDIT_NOTE_TEMPLATE = "RBAC Role {name} {verb} by {actor} on {timestamp}"
AUDIT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Security descriptor control bits, MS-DTYP 2.4.6
SE_DACL_PRESENT = 0x0004
SE_DACL_PROTECTED = 0x1000
SE_SELF_RELATIVE = 0x8000

DACL_SECURITY_INFORMATION = 0x04
ACL_REVISION_DS = 0x04

SCHEMA_PAGE_SIZE = 500

# Generic rights are stored by the directory in their mapped form.
DS_GENERIC_MAPPING: dict[AccessRights, int] = {
    AccessRights.GENERIC_READ: 0x00020094,
    AccessRights.GENERIC_WRITE: 0x00020028,
    AccessRights.GENERIC_EXECUTE: 0x00020004,
    AccessRights.GENERIC_ALL: 0x000F01FF,
}

# sAMAccountName forbidden characters
INVALID_NAME_CHARACTERS = frozenset('"/\\[]:;|=,+*?<>')
MAX_GROUP_NAME_LENGTH = 256
