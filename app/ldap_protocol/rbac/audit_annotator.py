"""Audit annotator.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from datetime import datetime, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo

from .base import DirectoryGateway
from .constants import (
    AUDIT_NOTE_ATTRIBUTE,
    AUDIT_NOTE_TEMPLATE,
    AUDIT_TIMESTAMP_FORMAT,
)
from .dataclasses import Identity, RoleHandle
from .enums import AuditAction
from .utils import log


class AuditAnnotator:
    """Write the provenance note on a role group."""

    def __init__(
        self,
        gateway: DirectoryGateway,
        note_attribute: str = AUDIT_NOTE_ATTRIBUTE,
        timezone: tzinfo = ZoneInfo("UTC"),
        clock: Callable[[tzinfo], datetime] | None = None,
    ) -> None:
        """Set gateway, note attribute and clock."""
        self._gateway = gateway
        self._note_attribute = note_attribute
        self._timezone = timezone
        self._clock = clock or datetime.now

    def build_note(
        self,
        handle: RoleHandle,
        actor: Identity,
        action: AuditAction,
    ) -> str:
        timestamp = self._clock(self._timezone).strftime(
            AUDIT_TIMESTAMP_FORMAT,
        )
        return AUDIT_NOTE_TEMPLATE.format(
            name=handle.name,
            verb=action.value,
            actor=actor,
            timestamp=timestamp,
        )

    def annotate(
        self,
        handle: RoleHandle,
        actor: Identity,
        action: AuditAction,
        description: str | None = None,
    ) -> str:
        """Write the note, and the description when given, in one modify.

        :raises DirectoryWriteError: modify refused
        :return: written note
        """
        note = self.build_note(handle, actor, action)
        attributes: dict[str, str | None] = {self._note_attribute: note}
        if description is not None:
            attributes["description"] = description or None

        self._gateway.update_group_attributes(
            handle.distinguished_name,
            attributes,
        )
        log.info(note)
        return note
