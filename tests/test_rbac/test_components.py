"""Tests for resolvers, locator, annotator and dry-run gateway.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from datetime import datetime, tzinfo
from typing import Callable

import pytest

from ldap_protocol.rbac import (
    AlreadyExistsError,
    AuditAction,
    AuditAnnotator,
    DryRunDirectoryGateway,
    Identity,
    NotFoundError,
    ResolutionError,
    RoleHandle,
    RoleLocator,
    RoleNotFoundError,
    SchemaGUIDResolver,
    SchemaResolutionError,
    SecurityDescriptor,
    TrusteeNotFoundError,
    TrusteeResolver,
)
from tests.conftest import InMemoryDirectoryGateway
from tests.constants import (
    DOMAIN_ADMINS_SID,
    GROUP_CLASS_GUID,
    ROLES_OU,
    SCHEMA_GUIDS,
)


def test_schema_resolver_returns_map(
    gateway: InMemoryDirectoryGateway,
) -> None:
    """Test display name map passed through."""
    assert SchemaGUIDResolver(gateway).resolve() == SCHEMA_GUIDS


def test_schema_resolver_partial_map(
    gateway: InMemoryDirectoryGateway,
) -> None:
    """Test lookup of present and absent names in a partial map."""
    gateway.schema = {"group": GROUP_CLASS_GUID}
    resolver = SchemaGUIDResolver(gateway)

    assert resolver.resolve_guid("group") == GROUP_CLASS_GUID
    with pytest.raises(SchemaResolutionError, match="'user'"):
        resolver.resolve_guid("user", resolver.resolve())


def test_trustee_resolver(gateway: InMemoryDirectoryGateway) -> None:
    """Test SID lookup and missing trustee."""
    resolver = TrusteeResolver(gateway)

    assert resolver.resolve("Domain Admins") == DOMAIN_ADMINS_SID

    with pytest.raises(TrusteeNotFoundError) as exc_info:
        resolver.resolve("Nobody")

    assert isinstance(exc_info.value, ResolutionError)
    assert isinstance(exc_info.value, NotFoundError)


def test_locator_create_and_locate(
    gateway: InMemoryDirectoryGateway,
) -> None:
    """Test created role is found by name afterwards."""
    locator = RoleLocator(gateway)

    created = locator.create_role("Role-A", "Test", ROLES_OU)

    assert created == RoleHandle(
        name="Role-A",
        distinguished_name="CN=Role-A,OU=Roles,DC=ex,DC=com",
    )
    assert locator.locate_role("role-a") == created


def test_locator_refuses_existing_group(
    gateway: InMemoryDirectoryGateway,
    role: RoleHandle,
) -> None:
    """Test group elsewhere in the tree blocks creation."""
    with pytest.raises(AlreadyExistsError):
        RoleLocator(gateway).create_role(
            role.name,
            "Test",
            "OU=Other,DC=ex,DC=com",
        )

    assert gateway.writes == []


def test_locator_missing_role(gateway: InMemoryDirectoryGateway) -> None:
    """Test missing role."""
    with pytest.raises(RoleNotFoundError):
        RoleLocator(gateway).locate_role("Role-Z")


def test_annotator_update_writes_description_and_note_once(
    gateway: InMemoryDirectoryGateway,
    role: RoleHandle,
    actor: Identity,
    frozen_clock: Callable[[tzinfo], datetime],
) -> None:
    """Test description and note written in one modify."""
    annotator = AuditAnnotator(
        gateway,
        note_attribute="adminDescription",
        clock=frozen_clock,
    )

    note = annotator.annotate(
        role,
        actor,
        AuditAction.UPDATED,
        description="Fresh",
    )

    assert note == (
        "RBAC Role Role-B updated by CN=admin,CN=Users,DC=ex,DC=com "
        "on 2025-03-01 12:30:45"
    )
    assert gateway.writes == [("modify", role.distinguished_name)]
    assert gateway.attributes[role.distinguished_name] == {
        "description": "Fresh",
        "adminDescription": note,
    }


def test_annotator_empty_description_clears_attribute(
    gateway: InMemoryDirectoryGateway,
    role: RoleHandle,
    actor: Identity,
) -> None:
    """Test empty description is written as a cleared value."""
    AuditAnnotator(gateway).annotate(
        role,
        actor,
        AuditAction.UPDATED,
        description="",
    )

    assert gateway.attributes[role.distinguished_name]["description"] is None


def test_dry_run_gateway_records_writes(
    gateway: InMemoryDirectoryGateway,
    role: RoleHandle,
) -> None:
    """Test writes recorded and reads delegated."""
    dry_run = DryRunDirectoryGateway(gateway)

    entry = dry_run.create_group("Role-N", "New", ROLES_OU)
    dry_run.update_group_attributes(role.distinguished_name, {"info": "x"})
    dry_run.set_security_descriptor(
        role.distinguished_name,
        SecurityDescriptor(is_protected=True),
    )

    assert gateway.writes == []
    assert dry_run.get_group("Role-N") == entry
    assert dry_run.get_group(role.name) == gateway.get_group(role.name)
    assert dry_run.get_security_descriptor(
        entry.distinguished_name,
    ) == SecurityDescriptor()
    assert [str(change) for change in dry_run.planned_changes] == [
        "create_group CN=Role-N,OU=Roles,DC=ex,DC=com: New",
        "update_group_attributes CN=Role-B,OU=Roles,DC=ex,DC=com: "
        "info='x'",
        "set_security_descriptor CN=Role-B,OU=Roles,DC=ex,DC=com: "
        "protected",
    ]
