"""Data classes for RBAC role provisioning.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import timedelta
from enum import IntEnum
from uuid import UUID

from .enums import AceFlags, AceType, ProvisionMode
from .exceptions import RBACError
from .schemas import DEFAULT_GRANTS, TrusteeGrant
from .utils import map_generic_rights


@dataclass(frozen=True)
class Identity:
    """Actor recorded in the audit note."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class GroupEntry:
    """Group as read from the directory."""

    name: str
    distinguished_name: str
    description: str | None = None


@dataclass(frozen=True)
class RoleHandle:
    """Stable reference to a provisioned role."""

    name: str
    distinguished_name: str

    @classmethod
    def from_entry(cls, entry: GroupEntry) -> RoleHandle:
        return cls(
            name=entry.name,
            distinguished_name=entry.distinguished_name,
        )


@dataclass(frozen=True)
class AccessControlEntry:
    """Single ACE of a discretionary ACL.

    ACE types outside ``AceType`` keep their wire form in ``raw`` and are
    written back untouched.
    """

    trustee: str
    mask: int
    ace_type: int = AceType.ACCESS_ALLOWED
    flags: int = 0
    object_type: UUID | None = None
    inherited_object_type: UUID | None = None
    raw: bytes | None = None

    @property
    def is_inherited(self) -> bool:
        return bool(self.flags & AceFlags.INHERITED)

    @property
    def is_allow(self) -> bool:
        return self.ace_type in (
            AceType.ACCESS_ALLOWED,
            AceType.ACCESS_ALLOWED_OBJECT,
        )

    def match_key(self) -> tuple:
        """Key under which two ACEs grant the same thing."""
        return (
            self.trustee.upper(),
            map_generic_rights(self.mask),
            self.ace_type,
            self.flags & ~int(AceFlags.INHERITED),
            self.object_type,
            self.inherited_object_type,
            self.raw,
        )

    def matches(self, other: AccessControlEntry) -> bool:
        return self.match_key() == other.match_key()

    def as_explicit(self) -> AccessControlEntry:
        """Copy of the ACE without the inherited bit."""
        return replace(self, flags=self.flags & ~int(AceFlags.INHERITED))

    def describe(self) -> str:
        verb = "allow" if self.is_allow else "deny"
        scope = f" on {self.object_type}" if self.object_type else ""
        return f"{verb} {self.trustee} mask=0x{self.mask:08X}{scope}"


@dataclass
class SecurityDescriptor:
    """Discretionary access control state of a directory object."""

    is_protected: bool = False
    aces: list[AccessControlEntry] = field(default_factory=list)
    raw: bytes | None = field(default=None, repr=False)

    @property
    def explicit_aces(self) -> list[AccessControlEntry]:
        return [ace for ace in self.aces if not ace.is_inherited]

    @property
    def inherited_aces(self) -> list[AccessControlEntry]:
        return [ace for ace in self.aces if ace.is_inherited]

    def set_inheritance_protection(
        self,
        is_protected: bool,
        preserve_inheritance: bool,
    ) -> None:
        """Protect the ACL from (or expose it to) parent ACEs.

        :param is_protected: block inheritance from parent containers
        :param preserve_inheritance: when protecting, keep the currently
            inherited ACEs as explicit ones instead of dropping them
        """
        if is_protected:
            if preserve_inheritance:
                self.aces = [ace.as_explicit() for ace in self.aces]
            else:
                self.aces = self.explicit_aces
        self.is_protected = is_protected


@dataclass(frozen=True)
class AclDiff:
    """Difference between the current and the desired explicit ACEs."""

    kept: list[AccessControlEntry] = field(default_factory=list)
    to_add: list[AccessControlEntry] = field(default_factory=list)
    to_remove: list[AccessControlEntry] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.to_add or self.to_remove)


@dataclass(frozen=True)
class NormalizationPolicy:
    """Grants asserted on every role and pruning behaviour."""

    grants: tuple[TrusteeGrant, ...] = DEFAULT_GRANTS
    remove_extraneous: bool = True


@dataclass(frozen=True)
class NormalizationResult:
    """Outcome of one ACL normalization."""

    handle: RoleHandle
    diff: AclDiff
    protection_changed: bool
    committed: bool


@dataclass(frozen=True)
class PlannedChange:
    """Directory write recorded instead of performed."""

    operation: str
    distinguished_name: str
    detail: str = ""

    def __str__(self) -> str:
        suffix = f": {self.detail}" if self.detail else ""
        return f"{self.operation} {self.distinguished_name}{suffix}"


@dataclass(frozen=True)
class ReportError:
    """Failure carried by a provisioning report."""

    code: IntEnum
    kind: str
    message: str

    @classmethod
    def from_exception(cls, err: RBACError) -> ReportError:
        return cls(code=err.code, kind=err.kind, message=str(err))


@dataclass
class ProvisionReport:
    """Result of one provisioning invocation."""

    role_name: str
    mode: ProvisionMode
    success: bool
    elapsed: timedelta
    error: ReportError | None = None
    distinguished_name: str | None = None
    acl_diff: AclDiff | None = None
    planned_changes: list[PlannedChange] = field(default_factory=list)
