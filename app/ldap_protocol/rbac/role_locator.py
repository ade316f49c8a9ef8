"""Role locator and creator.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from .base import DirectoryGateway
from .dataclasses import RoleHandle
from .exceptions import AlreadyExistsError, RoleNotFoundError
from .utils import log


class RoleLocator:
    """Find or create the group backing a role."""

    def __init__(self, gateway: DirectoryGateway) -> None:
        """Set gateway."""
        self._gateway = gateway

    def create_role(
        self,
        name: str,
        description: str,
        container_dn: str,
    ) -> RoleHandle:
        """Create the role group.

        :raises AlreadyExistsError: group with the name exists
        :raises InvalidPathError: container missing or malformed
        :raises DirectoryWriteError: directory refused the add
        """
        if existing := self._gateway.get_group(name):
            raise AlreadyExistsError(
                f"Role {name!r} already exists at "
                f"{existing.distinguished_name}",
            )

        entry = self._gateway.create_group(name, description, container_dn)
        log.info(f"Role {name} created at {entry.distinguished_name}")
        return RoleHandle.from_entry(entry)

    def locate_role(self, name: str) -> RoleHandle:
        """Find the role group.

        :raises RoleNotFoundError: no group with the name
        """
        entry = self._gateway.get_group(name)
        if entry is None:
            raise RoleNotFoundError(f"Role {name!r} not found")

        return RoleHandle.from_entry(entry)
