"""Test main config.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from copy import deepcopy
from datetime import datetime, tzinfo
from typing import Callable
from uuid import UUID

import pytest

from ldap_protocol.rbac import (
    AccessControlEntry,
    AceFlags,
    AceType,
    AlreadyExistsError,
    DirectoryGateway,
    DirectoryQueryError,
    GroupEntry,
    Identity,
    InvalidPathError,
    RoleHandle,
    SecurityDescriptor,
)
from ldap_protocol.rbac.utils import build_group_dn
from tests.constants import (
    ACTOR,
    AUTHENTICATED_USERS_SID,
    ROLES_OU,
    SCHEMA_GUIDS,
    TRUSTEE_SIDS,
)


def inherited_ace(
    trustee: str = AUTHENTICATED_USERS_SID,
) -> AccessControlEntry:
    """ACE a new object receives from its parent container."""
    return AccessControlEntry(
        trustee=trustee,
        mask=0x00020094,
        ace_type=AceType.ACCESS_ALLOWED,
        flags=AceFlags.INHERITED | AceFlags.CONTAINER_INHERIT,
    )


class InMemoryDirectoryGateway(DirectoryGateway):
    """Directory gateway over dictionaries, records every write."""

    def __init__(
        self,
        sids: dict[str, str] | None = None,
        schema: dict[str, UUID] | None = None,
        containers: set[str] | None = None,
    ) -> None:
        self.groups: dict[str, GroupEntry] = {}
        self.attributes: dict[str, dict[str, str | None]] = {}
        self.descriptors: dict[str, SecurityDescriptor] = {}
        self.sids = dict(TRUSTEE_SIDS if sids is None else sids)
        self.schema = dict(SCHEMA_GUIDS if schema is None else schema)
        self.containers = {ROLES_OU} if containers is None else containers
        self.writes: list[tuple[str, str]] = []
        self.schema_error: DirectoryQueryError | None = None

    @property
    def descriptor_writes(self) -> int:
        return sum(1 for op, _ in self.writes if op == "set_descriptor")

    def add_group(
        self,
        name: str,
        container_dn: str = ROLES_OU,
        description: str | None = None,
        descriptor: SecurityDescriptor | None = None,
    ) -> GroupEntry:
        entry = GroupEntry(
            name=name,
            distinguished_name=build_group_dn(name, container_dn),
            description=description,
        )
        self.groups[name.lower()] = entry
        self.attributes[entry.distinguished_name] = {
            "description": description,
        }
        self.descriptors[entry.distinguished_name] = deepcopy(
            descriptor or SecurityDescriptor(aces=[inherited_ace()]),
        )
        return entry

    def get_group(self, name: str) -> GroupEntry | None:
        return self.groups.get(name.lower())

    def create_group(
        self,
        name: str,
        description: str,
        container_dn: str,
    ) -> GroupEntry:
        if container_dn not in self.containers:
            raise InvalidPathError(f"No container {container_dn}")

        dn = build_group_dn(name, container_dn)
        if any(g.distinguished_name == dn for g in self.groups.values()):
            raise AlreadyExistsError(f"Entry {dn} already exists")

        self.writes.append(("create", dn))
        return self.add_group(name, container_dn, description or None)

    def update_group_attributes(
        self,
        distinguished_name: str,
        attributes: dict[str, str | None],
    ) -> None:
        self.writes.append(("modify", distinguished_name))
        self.attributes[distinguished_name].update(attributes)

    def get_security_descriptor(
        self,
        distinguished_name: str,
    ) -> SecurityDescriptor:
        return deepcopy(self.descriptors[distinguished_name])

    def set_security_descriptor(
        self,
        distinguished_name: str,
        descriptor: SecurityDescriptor,
    ) -> None:
        self.writes.append(("set_descriptor", distinguished_name))
        self.descriptors[distinguished_name] = deepcopy(descriptor)

    def query_schema_guids(self) -> dict[str, UUID]:
        if self.schema_error is not None:
            raise self.schema_error
        return dict(self.schema)

    def get_group_sid(self, name: str) -> str | None:
        return self.sids.get(name)

    def who_am_i(self) -> str | None:
        return ACTOR


@pytest.fixture
def gateway() -> InMemoryDirectoryGateway:
    """Get empty in-memory directory."""
    return InMemoryDirectoryGateway()


@pytest.fixture
def role(gateway: InMemoryDirectoryGateway) -> RoleHandle:
    """Get existing role with an inherited, unprotected ACL."""
    entry = gateway.add_group("Role-B", description="Old description")
    return RoleHandle.from_entry(entry)


@pytest.fixture
def actor() -> Identity:
    """Get provisioning actor."""
    return Identity(ACTOR)


@pytest.fixture
def frozen_clock() -> Callable[[tzinfo], datetime]:
    """Get clock stopped at 2025-03-01 12:30:45."""

    def _now(tz: tzinfo) -> datetime:
        return datetime(2025, 3, 1, 12, 30, 45, tzinfo=tz)

    return _now
