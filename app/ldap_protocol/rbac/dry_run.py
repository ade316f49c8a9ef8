"""Dry-run directory gateway.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from uuid import UUID

from .base import DirectoryGateway
from .dataclasses import GroupEntry, PlannedChange, SecurityDescriptor
from .utils import build_group_dn, log, logger_wraps


class DryRunDirectoryGateway(DirectoryGateway):
    """Pass reads through, record writes as planned changes.

    A group that would be created is remembered so later reads see it,
    its descriptor reads back as an empty unprotected one.
    """

    def __init__(self, gateway: DirectoryGateway) -> None:
        """Wrap the real gateway."""
        self._gateway = gateway
        self._pending_groups: dict[str, GroupEntry] = {}
        self.planned_changes: list[PlannedChange] = []

    def _plan(
        self,
        operation: str,
        distinguished_name: str,
        detail: str = "",
    ) -> None:
        change = PlannedChange(operation, distinguished_name, detail)
        self.planned_changes.append(change)
        log.info(f"Dry run, skipped {change}")

    def get_group(self, name: str) -> GroupEntry | None:
        if name.lower() in self._pending_groups:
            return self._pending_groups[name.lower()]
        return self._gateway.get_group(name)

    @logger_wraps(is_stub=True)
    def create_group(
        self,
        name: str,
        description: str,
        container_dn: str,
    ) -> GroupEntry:
        entry = GroupEntry(
            name=name,
            distinguished_name=build_group_dn(name, container_dn),
            description=description or None,
        )
        self._pending_groups[name.lower()] = entry
        self._plan("create_group", entry.distinguished_name, description)
        return entry

    @logger_wraps(is_stub=True)
    def update_group_attributes(
        self,
        distinguished_name: str,
        attributes: dict[str, str | None],
    ) -> None:
        detail = ", ".join(
            f"{attribute}={value!r}" for attribute, value in attributes.items()
        )
        self._plan("update_group_attributes", distinguished_name, detail)

    def get_security_descriptor(
        self,
        distinguished_name: str,
    ) -> SecurityDescriptor:
        for entry in self._pending_groups.values():
            if entry.distinguished_name == distinguished_name:
                return SecurityDescriptor()
        return self._gateway.get_security_descriptor(distinguished_name)

    @logger_wraps(is_stub=True)
    def set_security_descriptor(
        self,
        distinguished_name: str,
        descriptor: SecurityDescriptor,
    ) -> None:
        detail = "; ".join(ace.describe() for ace in descriptor.aces)
        if descriptor.is_protected:
            detail = f"protected; {detail}" if detail else "protected"
        self._plan("set_security_descriptor", distinguished_name, detail)

    def query_schema_guids(self) -> dict[str, UUID]:
        return self._gateway.query_schema_guids()

    def get_group_sid(self, name: str) -> str | None:
        return self._gateway.get_group_sid(name)

    def who_am_i(self) -> str | None:
        return self._gateway.who_am_i()
