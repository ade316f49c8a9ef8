"""Abstract directory gateway for RBAC provisioning.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from abc import ABC, abstractmethod
from uuid import UUID

from .dataclasses import GroupEntry, SecurityDescriptor


class DirectoryGateway(ABC):
    """Directory operations the provisioner depends on."""

    @abstractmethod
    def get_group(self, name: str) -> GroupEntry | None:
        """Find a group by ``sAMAccountName``."""

    @abstractmethod
    def create_group(
        self,
        name: str,
        description: str,
        container_dn: str,
    ) -> GroupEntry:
        """Create a group in the container."""

    @abstractmethod
    def update_group_attributes(
        self,
        distinguished_name: str,
        attributes: dict[str, str | None],
    ) -> None:
        """Replace attribute values in a single modify, ``None`` clears."""

    @abstractmethod
    def get_security_descriptor(
        self,
        distinguished_name: str,
    ) -> SecurityDescriptor:
        """Read the DACL part of ``nTSecurityDescriptor``."""

    @abstractmethod
    def set_security_descriptor(
        self,
        distinguished_name: str,
        descriptor: SecurityDescriptor,
    ) -> None:
        """Write the DACL part of ``nTSecurityDescriptor``."""

    @abstractmethod
    def query_schema_guids(self) -> dict[str, UUID]:
        """Map of ``lDAPDisplayName`` to ``schemaIDGUID``."""

    @abstractmethod
    def get_group_sid(self, name: str) -> str | None:
        """SID of a trustee group, ``None`` when absent."""

    @abstractmethod
    def who_am_i(self) -> str | None:
        """Identity the connection is bound as."""
