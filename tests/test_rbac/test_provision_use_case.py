"""Tests for ProvisionRoleUseCase.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from datetime import datetime, timedelta, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo

import pytest

from ldap_protocol.rbac import (
    AccessRights,
    AceType,
    Identity,
    ProvisionMode,
    ProvisionRoleUseCase,
    RoleHandle,
)
from ldap_protocol.rbac.exceptions import ErrorCodes
from tests.conftest import InMemoryDirectoryGateway
from tests.constants import (
    ACTOR,
    DOMAIN_ADMINS_SID,
    ENTERPRISE_ADMINS_SID,
    GROUP_CLASS_GUID,
    ROLES_OU,
)


@pytest.fixture
def use_case(
    gateway: InMemoryDirectoryGateway,
    frozen_clock: Callable[[tzinfo], datetime],
) -> ProvisionRoleUseCase:
    """Get use case over the in-memory directory."""
    return ProvisionRoleUseCase(gateway, clock=frozen_clock)


def test_provision_new_role(
    use_case: ProvisionRoleUseCase,
    gateway: InMemoryDirectoryGateway,
    actor: Identity,
) -> None:
    """Test Role-A created, annotated and granted to both admin groups."""
    report = use_case.provision_new(
        "Role-A",
        "Test",
        ROLES_OU,
        actor,
        ProvisionMode.APPLY,
    )

    dn = "CN=Role-A,OU=Roles,DC=ex,DC=com"
    assert report.success
    assert report.error is None
    assert report.distinguished_name == dn
    assert isinstance(report.elapsed, timedelta)

    descriptor = gateway.descriptors[dn]
    assert descriptor.is_protected
    assert len(descriptor.aces) == 2
    assert {ace.trustee for ace in descriptor.aces} == {
        ENTERPRISE_ADMINS_SID,
        DOMAIN_ADMINS_SID,
    }
    for ace in descriptor.aces:
        assert ace.mask == AccessRights.GENERIC_ALL
        assert ace.ace_type == AceType.ACCESS_ALLOWED_OBJECT
        assert ace.object_type == GROUP_CLASS_GUID

    assert gateway.attributes[dn] == {
        "description": "Test",
        "info": (
            f"RBAC Role Role-A created by {ACTOR} on 2025-03-01 12:30:45"
        ),
    }
    assert [op for op, _ in gateway.writes] == [
        "create",
        "modify",
        "set_descriptor",
    ]


def test_provision_existing_is_idempotent(
    use_case: ProvisionRoleUseCase,
    gateway: InMemoryDirectoryGateway,
    role: RoleHandle,
    actor: Identity,
) -> None:
    """Test second run leaves the same ACEs and skips the ACL write."""
    first = use_case.provision_existing(
        role.name,
        "New description",
        actor,
        ProvisionMode.APPLY,
    )
    aces = list(gateway.descriptors[role.distinguished_name].aces)

    second = use_case.provision_existing(
        role.name,
        "New description",
        actor,
        ProvisionMode.APPLY,
    )

    assert first.success
    assert second.success
    assert first.acl_diff is not None
    assert first.acl_diff.has_changes
    assert second.acl_diff is not None
    assert not second.acl_diff.has_changes
    assert gateway.descriptors[role.distinguished_name].aces == aces
    assert len(aces) == 2
    assert gateway.descriptor_writes == 1
    assert gateway.attributes[role.distinguished_name] == {
        "description": "New description",
        "info": (
            f"RBAC Role Role-B updated by {ACTOR} on 2025-03-01 12:30:45"
        ),
    }


def test_provision_new_on_existing_name(
    use_case: ProvisionRoleUseCase,
    gateway: InMemoryDirectoryGateway,
    role: RoleHandle,
    actor: Identity,
) -> None:
    """Test existing group reported as AlreadyExistsError, ACL untouched."""
    before = gateway.get_security_descriptor(role.distinguished_name)

    report = use_case.provision_new(
        role.name,
        "Test",
        ROLES_OU,
        actor,
        ProvisionMode.APPLY,
    )

    assert not report.success
    assert report.error is not None
    assert report.error.kind == "AlreadyExistsError"
    assert report.error.code == ErrorCodes.ALREADY_EXISTS_ERROR
    assert gateway.writes == []
    assert gateway.descriptors[role.distinguished_name] == before


def test_provision_existing_missing_role(
    use_case: ProvisionRoleUseCase,
    gateway: InMemoryDirectoryGateway,
    actor: Identity,
) -> None:
    """Test missing role reported as RoleNotFoundError with no writes."""
    report = use_case.provision_existing(
        "Role-Z",
        "Test",
        actor,
        ProvisionMode.APPLY,
    )

    assert not report.success
    assert report.error is not None
    assert report.error.kind == "RoleNotFoundError"
    assert report.error.message == "Role 'Role-Z' not found"
    assert gateway.writes == []
    assert report.elapsed >= timedelta(0)


def test_dry_run_new_role_writes_nothing(
    use_case: ProvisionRoleUseCase,
    gateway: InMemoryDirectoryGateway,
    actor: Identity,
) -> None:
    """Test dry run reports planned changes without touching the directory."""
    report = use_case.provision_new("Role-A", "Test", ROLES_OU, actor)

    assert report.mode == ProvisionMode.DRY_RUN
    assert report.success
    assert gateway.writes == []
    assert "role-a" not in gateway.groups
    assert [change.operation for change in report.planned_changes] == [
        "create_group",
        "update_group_attributes",
        "set_security_descriptor",
    ]
    assert all(
        change.distinguished_name == "CN=Role-A,OU=Roles,DC=ex,DC=com"
        for change in report.planned_changes
    )


def test_dry_run_existing_role_reads_live_acl(
    use_case: ProvisionRoleUseCase,
    gateway: InMemoryDirectoryGateway,
    role: RoleHandle,
    actor: Identity,
) -> None:
    """Test dry run diff is computed against the stored descriptor."""
    use_case.provision_existing(role.name, "x", actor, ProvisionMode.APPLY)

    report = use_case.provision_existing(role.name, "x", actor)

    assert report.success
    assert report.acl_diff is not None
    assert not report.acl_diff.has_changes
    assert [change.operation for change in report.planned_changes] == [
        "update_group_attributes",
    ]
    assert gateway.descriptor_writes == 1


def test_missing_trustee_reported(
    gateway: InMemoryDirectoryGateway,
    role: RoleHandle,
    actor: Identity,
) -> None:
    """Test unresolved trustee fails the run, descriptor unchanged."""
    del gateway.sids["Domain Admins"]
    before = gateway.get_security_descriptor(role.distinguished_name)
    use_case = ProvisionRoleUseCase(gateway)

    report = use_case.provision_existing(
        role.name,
        "Test",
        actor,
        ProvisionMode.APPLY,
    )

    assert not report.success
    assert report.error is not None
    assert report.error.kind == "TrusteeNotFoundError"
    assert gateway.descriptors[role.distinguished_name] == before
    assert gateway.descriptor_writes == 0


@pytest.mark.parametrize(
    ("name", "container"),
    [
        ("", ROLES_OU),
        ("   ", ROLES_OU),
        ("Role/A", ROLES_OU),
        ("Role*", ROLES_OU),
        ("x" * 257, ROLES_OU),
        ("Role-A", ""),
        ("Role-A", "not a dn"),
    ],
)
def test_invalid_input_rejected_before_directory_calls(
    use_case: ProvisionRoleUseCase,
    gateway: InMemoryDirectoryGateway,
    actor: Identity,
    name: str,
    container: str,
) -> None:
    """Test malformed names and paths fail as invalid input."""
    report = use_case.provision_new(
        name,
        "Test",
        container,
        actor,
        ProvisionMode.APPLY,
    )

    assert not report.success
    assert report.error is not None
    assert report.error.kind in {"InvalidInputError", "InvalidPathError"}
    assert gateway.writes == []


def test_absent_container_reported_as_invalid_path(
    use_case: ProvisionRoleUseCase,
    gateway: InMemoryDirectoryGateway,
    actor: Identity,
) -> None:
    """Test container rejected by the directory."""
    report = use_case.provision_new(
        "Role-A",
        "Test",
        "OU=Missing,DC=ex,DC=com",
        actor,
        ProvisionMode.APPLY,
    )

    assert report.error is not None
    assert report.error.kind == "InvalidPathError"
    assert report.error.code == ErrorCodes.INVALID_PATH_ERROR


def test_audit_timestamp_uses_configured_timezone(
    gateway: InMemoryDirectoryGateway,
    role: RoleHandle,
    actor: Identity,
) -> None:
    """Test note timestamp rendered in the configured zone."""
    moment = datetime(2025, 3, 1, 9, 0, tzinfo=ZoneInfo("UTC"))
    use_case = ProvisionRoleUseCase(
        gateway,
        timezone=ZoneInfo("Europe/Moscow"),
        clock=lambda tz: moment.astimezone(tz),
    )

    use_case.provision_existing(role.name, "d", actor, ProvisionMode.APPLY)

    note = gateway.attributes[role.distinguished_name]["info"]
    assert note is not None
    assert note.endswith("on 2025-03-01 12:00:00")
