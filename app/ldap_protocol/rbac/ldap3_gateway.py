"""ldap3 directory gateway.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from typing import Any
from uuid import UUID

from ldap3 import BASE, LEVEL, MODIFY_REPLACE, SUBTREE, Connection
from ldap3.core.exceptions import LDAPException
from ldap3.core.results import (
    RESULT_ENTRY_ALREADY_EXISTS,
    RESULT_INVALID_DN_SYNTAX,
    RESULT_NO_SUCH_OBJECT,
    RESULT_SUCCESS,
)
from ldap3.protocol.microsoft import security_descriptor_control
from ldap3.utils.conv import escape_filter_chars

from .base import DirectoryGateway
from .constants import (
    DACL_SECURITY_INFORMATION,
    GLOBAL_SECURITY_GROUP_TYPE,
    GROUP_OBJECT_CLASS,
    GROUP_OBJECT_CLASSES,
    SCHEMA_PAGE_SIZE,
)
from .dataclasses import GroupEntry, SecurityDescriptor
from .exceptions import (
    ACLCommitError,
    AlreadyExistsError,
    DirectoryQueryError,
    DirectoryWriteError,
    InvalidPathError,
)
from .security_descriptor import (
    decode_security_descriptor,
    decode_sid,
    encode_security_descriptor,
)
from .utils import build_group_dn, log, logger_wraps

_SD_ATTRIBUTE = "nTSecurityDescriptor"
_GROUP_ATTRIBUTES = ["sAMAccountName", "description", "objectSid"]


def _first(
    raw_attributes: dict[str, list[bytes]],
    name: str,
) -> bytes | None:
    values = raw_attributes.get(name) or []
    return values[0] if values else None


def _text(raw_attributes: dict[str, list[bytes]], name: str) -> str | None:
    value = _first(raw_attributes, name)
    return value.decode("utf-8") if value is not None else None


class LDAP3DirectoryGateway(DirectoryGateway):
    """Directory gateway over a bound synchronous ldap3 connection."""

    def __init__(
        self,
        connection: Connection,
        base_dn: str,
        trustee_search_base: str | None = None,
        group_type: int = GLOBAL_SECURITY_GROUP_TYPE,
    ) -> None:
        """Set connection and search bases."""
        self._connection = connection
        self._base_dn = base_dn
        self._trustee_search_base = trustee_search_base or base_dn
        self._group_type = group_type

    @property
    def _result_code(self) -> int:
        return self._connection.result.get("result", RESULT_SUCCESS)

    @property
    def _result_message(self) -> str:
        result = self._connection.result
        return result.get("message") or result.get("description") or ""

    def _entries(self) -> list[dict[str, Any]]:
        return [
            item
            for item in self._connection.response or []
            if item.get("type") == "searchResEntry"
        ]

    def _search(
        self,
        search_base: str,
        search_filter: str,
        search_scope: str,
        attributes: list[str],
        controls: list | None = None,
        missing_ok: bool = False,
    ) -> list[dict[str, Any]]:
        """Search and return entries.

        A missing ``search_base`` is an empty result only with
        ``missing_ok``, when the base is the object looked up.
        """
        try:
            self._connection.search(
                search_base=search_base,
                search_filter=search_filter,
                search_scope=search_scope,
                attributes=attributes,
                controls=controls,
            )
        except LDAPException as err:
            raise DirectoryQueryError(
                f"Search under {search_base!r} failed: {err}",
            ) from err

        if missing_ok and self._result_code == RESULT_NO_SUCH_OBJECT:
            return []

        if self._result_code != RESULT_SUCCESS:
            raise DirectoryQueryError(
                f"Search under {search_base!r} failed: "
                f"{self._result_code} {self._result_message}",
            )

        return self._entries()

    def _find_group(
        self,
        name: str,
        search_base: str,
    ) -> dict[str, Any] | None:
        search_filter = (
            f"(&(objectClass={GROUP_OBJECT_CLASS})"
            f"(sAMAccountName={escape_filter_chars(name)}))"
        )
        entries = self._search(
            search_base,
            search_filter,
            SUBTREE,
            _GROUP_ATTRIBUTES,
        )
        return entries[0] if entries else None

    @logger_wraps()
    def get_group(self, name: str) -> GroupEntry | None:
        entry = self._find_group(name, self._base_dn)
        if entry is None:
            return None

        raw = entry["raw_attributes"]
        return GroupEntry(
            name=_text(raw, "sAMAccountName") or name,
            distinguished_name=entry["dn"],
            description=_text(raw, "description"),
        )

    @logger_wraps()
    def create_group(
        self,
        name: str,
        description: str,
        container_dn: str,
    ) -> GroupEntry:
        distinguished_name = build_group_dn(name, container_dn)
        attributes: dict[str, Any] = {
            "sAMAccountName": name,
            "groupType": self._group_type,
        }
        if description:
            attributes["description"] = description

        try:
            self._connection.add(
                distinguished_name,
                object_class=GROUP_OBJECT_CLASSES,
                attributes=attributes,
            )
        except LDAPException as err:
            raise DirectoryWriteError(
                f"Cannot create group {distinguished_name!r}: {err}",
            ) from err

        code = self._result_code
        if code == RESULT_ENTRY_ALREADY_EXISTS:
            raise AlreadyExistsError(
                f"Entry {distinguished_name!r} already exists",
            )
        if code in (RESULT_NO_SUCH_OBJECT, RESULT_INVALID_DN_SYNTAX):
            raise InvalidPathError(
                f"Container {container_dn!r} is not usable: "
                f"{self._result_message}",
            )
        if code != RESULT_SUCCESS:
            raise DirectoryWriteError(
                f"Cannot create group {distinguished_name!r}: "
                f"{code} {self._result_message}",
            )

        log.info(f"Created group {distinguished_name}")
        return GroupEntry(
            name=name,
            distinguished_name=distinguished_name,
            description=description or None,
        )

    @logger_wraps()
    def update_group_attributes(
        self,
        distinguished_name: str,
        attributes: dict[str, str | None],
    ) -> None:
        changes = {
            attribute: [
                (MODIFY_REPLACE, [value] if value is not None else []),
            ]
            for attribute, value in attributes.items()
        }

        try:
            self._connection.modify(distinguished_name, changes)
        except LDAPException as err:
            raise DirectoryWriteError(
                f"Cannot modify {distinguished_name!r}: {err}",
            ) from err

        if self._result_code != RESULT_SUCCESS:
            raise DirectoryWriteError(
                f"Cannot modify {distinguished_name!r}: "
                f"{self._result_code} {self._result_message}",
            )

    @logger_wraps()
    def get_security_descriptor(
        self,
        distinguished_name: str,
    ) -> SecurityDescriptor:
        entries = self._search(
            distinguished_name,
            "(objectClass=*)",
            BASE,
            [_SD_ATTRIBUTE],
            controls=security_descriptor_control(
                sdflags=DACL_SECURITY_INFORMATION,
            ),
            missing_ok=True,
        )
        data = (
            _first(entries[0]["raw_attributes"], _SD_ATTRIBUTE)
            if entries
            else None
        )

        if not data:
            raise DirectoryQueryError(
                f"No security descriptor readable on {distinguished_name!r}",
            )

        return decode_security_descriptor(data)

    @logger_wraps()
    def set_security_descriptor(
        self,
        distinguished_name: str,
        descriptor: SecurityDescriptor,
    ) -> None:
        data = encode_security_descriptor(descriptor)

        try:
            self._connection.modify(
                distinguished_name,
                {_SD_ATTRIBUTE: [(MODIFY_REPLACE, [data])]},
                controls=security_descriptor_control(
                    sdflags=DACL_SECURITY_INFORMATION,
                ),
            )
        except LDAPException as err:
            raise ACLCommitError(
                f"Cannot write ACL of {distinguished_name!r}: {err}",
            ) from err

        if self._result_code != RESULT_SUCCESS:
            raise ACLCommitError(
                f"Cannot write ACL of {distinguished_name!r}: "
                f"{self._result_code} {self._result_message}",
            )

    def _schema_naming_context(self) -> str:
        entries = self._search(
            "",
            "(objectClass=*)",
            BASE,
            ["schemaNamingContext"],
        )
        naming_context = (
            _text(entries[0]["raw_attributes"], "schemaNamingContext")
            if entries
            else None
        )
        if not naming_context:
            raise DirectoryQueryError("rootDSE has no schemaNamingContext")
        return naming_context

    @logger_wraps()
    def query_schema_guids(self) -> dict[str, UUID]:
        schema_dn = self._schema_naming_context()
        guids: dict[str, UUID] = {}

        try:
            for entry in self._connection.extend.standard.paged_search(
                search_base=schema_dn,
                search_filter="(schemaIDGUID=*)",
                search_scope=LEVEL,
                attributes=["lDAPDisplayName", "schemaIDGUID"],
                paged_size=SCHEMA_PAGE_SIZE,
                generator=True,
            ):
                if entry.get("type") != "searchResEntry":
                    continue

                raw = entry["raw_attributes"]
                name = _text(raw, "lDAPDisplayName")
                guid = _first(raw, "schemaIDGUID")
                if name and guid and len(guid) == 16:
                    guids[name] = UUID(bytes_le=guid)
        except LDAPException as err:
            raise DirectoryQueryError(
                f"Schema search under {schema_dn!r} failed: {err}",
            ) from err

        if self._result_code != RESULT_SUCCESS:
            raise DirectoryQueryError(
                f"Schema search under {schema_dn!r} failed: "
                f"{self._result_code} {self._result_message}",
            )

        log.debug(f"Loaded {len(guids)} schema GUIDs from {schema_dn}")
        return guids

    @logger_wraps()
    def get_group_sid(self, name: str) -> str | None:
        entry = self._find_group(name, self._trustee_search_base)
        if entry is None:
            return None

        object_sid = _first(entry["raw_attributes"], "objectSid")
        return decode_sid(object_sid) if object_sid else None

    @logger_wraps()
    def who_am_i(self) -> str | None:
        try:
            identity = self._connection.extend.standard.who_am_i()
        except LDAPException as err:
            raise DirectoryQueryError(f"Who am I failed: {err}") from err

        if not identity:
            return None

        for prefix in ("u:", "dn:"):
            if identity.startswith(prefix):
                return identity[len(prefix):]
        return identity
