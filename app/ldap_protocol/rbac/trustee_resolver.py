"""Trustee resolver.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from .base import DirectoryGateway
from .exceptions import TrusteeNotFoundError
from .utils import log


class TrusteeResolver:
    """Resolve administrative group names to SIDs."""

    def __init__(self, gateway: DirectoryGateway) -> None:
        """Set gateway."""
        self._gateway = gateway

    def resolve(self, group_name: str) -> str:
        """SID of the named group.

        :raises TrusteeNotFoundError: no such group
        """
        sid = self._gateway.get_group_sid(group_name)
        if not sid:
            raise TrusteeNotFoundError(
                f"Trustee group {group_name!r} not found",
            )

        log.debug(f"Trustee {group_name} resolved to {sid}")
        return sid
