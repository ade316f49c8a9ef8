"""Schema GUID resolver.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from uuid import UUID

from .base import DirectoryGateway
from .exceptions import SchemaResolutionError
from .utils import log


class SchemaGUIDResolver:
    """Resolve schema class and attribute names to ``schemaIDGUID``."""

    def __init__(self, gateway: DirectoryGateway) -> None:
        """Set gateway."""
        self._gateway = gateway

    def resolve(self) -> dict[str, UUID]:
        """Build the display name to GUID map.

        Entries without a display name are skipped, a partial map is
        returned as is.

        :raises DirectoryQueryError: schema container unreachable
        :return: map keyed by ``lDAPDisplayName``
        """
        guid_map = self._gateway.query_schema_guids()
        log.debug(f"Schema GUID map holds {len(guid_map)} names")
        return guid_map

    def resolve_guid(
        self,
        name: str,
        guid_map: dict[str, UUID] | None = None,
    ) -> UUID:
        """GUID of one schema class or attribute.

        :param name: ``lDAPDisplayName`` to look up
        :param guid_map: map from a previous ``resolve`` call
        :raises SchemaResolutionError: name absent from the schema
        """
        if guid_map is None:
            guid_map = self.resolve()

        try:
            return guid_map[name]
        except KeyError:
            raise SchemaResolutionError(
                f"Schema has no class or attribute named {name!r}",
            ) from None
