"""Access control normalizer for role groups.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from uuid import UUID

from .base import DirectoryGateway
from .dataclasses import (
    AccessControlEntry,
    AclDiff,
    NormalizationPolicy,
    NormalizationResult,
    RoleHandle,
)
from .enums import AceType
from .exceptions import (
    DirectoryQueryError,
    ResolutionError,
    SchemaResolutionError,
)
from .schema_resolver import SchemaGUIDResolver
from .schemas import TrusteeGrant
from .trustee_resolver import TrusteeResolver
from .utils import log

_DENY_TYPES = frozenset({AceType.ACCESS_DENIED, AceType.ACCESS_DENIED_OBJECT})


def diff_aces(
    current: list[AccessControlEntry],
    desired: list[AccessControlEntry],
    remove_extraneous: bool = True,
) -> AclDiff:
    """Compare explicit ACEs with the desired ones.

    One instance of every desired ACE already present is kept, further
    copies are removed. ACEs outside the desired set are removed only
    with ``remove_extraneous``.
    """
    wanted: dict[tuple, AccessControlEntry] = {}
    for ace in desired:
        wanted.setdefault(ace.match_key(), ace)

    kept: list[AccessControlEntry] = []
    to_remove: list[AccessControlEntry] = []
    seen: set[tuple] = set()

    for ace in current:
        key = ace.match_key()
        if key in wanted:
            if key in seen:
                to_remove.append(ace)
            else:
                seen.add(key)
                kept.append(ace)
        elif remove_extraneous:
            to_remove.append(ace)
        else:
            kept.append(ace)

    to_add = [ace for key, ace in wanted.items() if key not in seen]
    return AclDiff(kept=kept, to_add=to_add, to_remove=to_remove)


def canonical_order(
    aces: list[AccessControlEntry],
) -> list[AccessControlEntry]:
    """Explicit deny entries first, stable otherwise."""
    return sorted(aces, key=lambda ace: ace.ace_type not in _DENY_TYPES)


class ACLNormalizer:
    """Bring a role group's DACL to the configured grants."""

    def __init__(
        self,
        gateway: DirectoryGateway,
        policy: NormalizationPolicy | None = None,
        schema_resolver: SchemaGUIDResolver | None = None,
        trustee_resolver: TrusteeResolver | None = None,
    ) -> None:
        """Set gateway, policy and resolvers."""
        self._gateway = gateway
        self._policy = policy or NormalizationPolicy()
        self._schema_resolver = schema_resolver or SchemaGUIDResolver(gateway)
        self._trustee_resolver = trustee_resolver or TrusteeResolver(gateway)

    def _resolve_schema(self) -> dict[str, UUID]:
        if not any(grant.object_class for grant in self._policy.grants):
            return {}

        try:
            return self._schema_resolver.resolve()
        except DirectoryQueryError as err:
            raise SchemaResolutionError(
                f"Schema GUIDs cannot be read: {err}",
            ) from err

    def _resolve_trustee(self, grant: TrusteeGrant) -> str:
        try:
            return self._trustee_resolver.resolve(grant.trustee_name)
        except DirectoryQueryError as err:
            raise ResolutionError(
                f"Trustee {grant.trustee_name!r} cannot be read: {err}",
            ) from err

    def build_desired_aces(self) -> list[AccessControlEntry]:
        """ACEs the configured grants call for.

        :raises SchemaResolutionError: object class unknown to the schema
        :raises ResolutionError: trustee absent or unreadable
        """
        guid_map = self._resolve_schema()
        desired = []

        for grant in self._policy.grants:
            object_type = None
            if grant.object_class:
                object_type = self._schema_resolver.resolve_guid(
                    grant.object_class,
                    guid_map,
                )

            if object_type is not None:
                ace_type = (
                    AceType.ACCESS_ALLOWED_OBJECT
                    if grant.is_allow
                    else AceType.ACCESS_DENIED_OBJECT
                )
            else:
                ace_type = (
                    AceType.ACCESS_ALLOWED
                    if grant.is_allow
                    else AceType.ACCESS_DENIED
                )

            desired.append(
                AccessControlEntry(
                    trustee=self._resolve_trustee(grant),
                    mask=grant.rights,
                    ace_type=ace_type,
                    flags=int(grant.scope.ace_flags),
                    object_type=object_type,
                ),
            )

        return desired

    def normalize(self, handle: RoleHandle) -> NormalizationResult:
        """Protect the DACL and leave exactly the desired explicit ACEs.

        Nothing is written before every trustee and schema GUID resolved.
        The descriptor is committed once, or not at all when already in
        the desired state.

        :raises DirectoryQueryError: descriptor unreadable
        :raises ResolutionError: trustee or schema GUID unresolved
        :raises ACLCommitError: descriptor write refused
        """
        dn = handle.distinguished_name
        descriptor = self._gateway.get_security_descriptor(dn)

        protection_changed = not descriptor.is_protected or bool(
            descriptor.inherited_aces,
        )
        descriptor.set_inheritance_protection(
            is_protected=True,
            preserve_inheritance=False,
        )

        diff = diff_aces(
            descriptor.explicit_aces,
            self.build_desired_aces(),
            remove_extraneous=self._policy.remove_extraneous,
        )

        if not protection_changed and not diff.has_changes:
            log.info(f"ACL of {dn} already normalized")
            return NormalizationResult(
                handle=handle,
                diff=diff,
                protection_changed=False,
                committed=False,
            )

        descriptor.aces = canonical_order(diff.kept + diff.to_add)
        self._gateway.set_security_descriptor(dn, descriptor)

        log.info(
            f"ACL of {dn} normalized: {len(diff.to_add)} added, "
            f"{len(diff.to_remove)} removed, "
            f"protection {'set' if protection_changed else 'kept'}",
        )
        return NormalizationResult(
            handle=handle,
            diff=diff,
            protection_changed=protection_changed,
            committed=True,
        )
