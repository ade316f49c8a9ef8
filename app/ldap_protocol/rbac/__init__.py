"""RBAC role provisioning.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from .acl_normalizer import ACLNormalizer, canonical_order, diff_aces
from .audit_annotator import AuditAnnotator
from .base import DirectoryGateway
from .dataclasses import (
    AccessControlEntry,
    AclDiff,
    GroupEntry,
    Identity,
    NormalizationPolicy,
    NormalizationResult,
    PlannedChange,
    ProvisionReport,
    ReportError,
    RoleHandle,
    SecurityDescriptor,
)
from .dry_run import DryRunDirectoryGateway
from .enums import (
    AccessRights,
    AceFlags,
    AceScope,
    AceType,
    AuditAction,
    ProvisionMode,
)
from .exceptions import (
    ACLCommitError,
    AlreadyExistsError,
    DirectoryQueryError,
    DirectoryWriteError,
    InvalidInputError,
    InvalidPathError,
    NotFoundError,
    RBACError,
    ResolutionError,
    RoleNotFoundError,
    SchemaResolutionError,
    SecurityDescriptorFormatError,
    TrusteeNotFoundError,
)
from .ldap3_gateway import LDAP3DirectoryGateway
from .provision_use_case import ProvisionRoleUseCase
from .role_locator import RoleLocator
from .schema_resolver import SchemaGUIDResolver
from .schemas import DEFAULT_GRANTS, TrusteeGrant
from .security_descriptor import (
    decode_security_descriptor,
    decode_sid,
    encode_security_descriptor,
)
from .trustee_resolver import TrusteeResolver
from .utils import log, setup_logging

__all__ = [
    "ACLCommitError",
    "ACLNormalizer",
    "AccessControlEntry",
    "AccessRights",
    "AceFlags",
    "AceScope",
    "AceType",
    "AclDiff",
    "AlreadyExistsError",
    "AuditAction",
    "AuditAnnotator",
    "DEFAULT_GRANTS",
    "DirectoryGateway",
    "DirectoryQueryError",
    "DirectoryWriteError",
    "DryRunDirectoryGateway",
    "GroupEntry",
    "Identity",
    "InvalidInputError",
    "InvalidPathError",
    "LDAP3DirectoryGateway",
    "NormalizationPolicy",
    "NormalizationResult",
    "NotFoundError",
    "PlannedChange",
    "ProvisionMode",
    "ProvisionReport",
    "ProvisionRoleUseCase",
    "RBACError",
    "ReportError",
    "ResolutionError",
    "RoleHandle",
    "RoleLocator",
    "RoleNotFoundError",
    "SchemaGUIDResolver",
    "SchemaResolutionError",
    "SecurityDescriptor",
    "SecurityDescriptorFormatError",
    "TrusteeGrant",
    "TrusteeNotFoundError",
    "TrusteeResolver",
    "canonical_order",
    "decode_security_descriptor",
    "decode_sid",
    "diff_aces",
    "encode_security_descriptor",
    "log",
    "setup_logging",
]
