"""nTSecurityDescriptor codec.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from uuid import UUID

from impacket.ldap import ldaptypes

from .constants import (
    ACL_REVISION_DS,
    SE_DACL_PRESENT,
    SE_DACL_PROTECTED,
    SE_SELF_RELATIVE,
)
from .dataclasses import AccessControlEntry, SecurityDescriptor
from .enums import AceType
from .exceptions import SecurityDescriptorFormatError

_ACE_BODIES: dict[AceType, type] = {
    AceType.ACCESS_ALLOWED: ldaptypes.ACCESS_ALLOWED_ACE,
    AceType.ACCESS_DENIED: ldaptypes.ACCESS_DENIED_ACE,
    AceType.ACCESS_ALLOWED_OBJECT: ldaptypes.ACCESS_ALLOWED_OBJECT_ACE,
    AceType.ACCESS_DENIED_OBJECT: ldaptypes.ACCESS_DENIED_OBJECT_ACE,
}

_OBJECT_ACE_TYPES = frozenset(
    {AceType.ACCESS_ALLOWED_OBJECT, AceType.ACCESS_DENIED_OBJECT},
)

_OBJECT_TYPE_PRESENT = (
    ldaptypes.ACCESS_ALLOWED_OBJECT_ACE.ACE_OBJECT_TYPE_PRESENT
)
_INHERITED_OBJECT_TYPE_PRESENT = (
    ldaptypes.ACCESS_ALLOWED_OBJECT_ACE.ACE_INHERITED_OBJECT_TYPE_PRESENT
)


def _empty_descriptor() -> ldaptypes.SR_SECURITY_DESCRIPTOR:
    sd = ldaptypes.SR_SECURITY_DESCRIPTOR()
    sd["Revision"] = b"\x01"
    sd["Sbz1"] = b"\x00"
    sd["Control"] = SE_SELF_RELATIVE | SE_DACL_PRESENT
    sd["OwnerSid"] = b""
    sd["GroupSid"] = b""
    sd["Sacl"] = b""
    sd["Dacl"] = b""
    return sd


def _decode_ace(ace: ldaptypes.ACE) -> AccessControlEntry:
    ace_type = ace["AceType"]
    if ace_type not in _ACE_BODIES:
        return AccessControlEntry(
            trustee="",
            mask=0,
            ace_type=ace_type,
            flags=ace["AceFlags"],
            raw=ace.getData(),
        )

    body = ace["Ace"]
    object_type = inherited_object_type = None

    if ace_type in _OBJECT_ACE_TYPES:
        if body["Flags"] & _OBJECT_TYPE_PRESENT:
            object_type = UUID(bytes_le=bytes(body["ObjectType"]))
        if body["Flags"] & _INHERITED_OBJECT_TYPE_PRESENT:
            inherited_object_type = UUID(
                bytes_le=bytes(body["InheritedObjectType"]),
            )

    return AccessControlEntry(
        trustee=body["Sid"].formatCanonical(),
        mask=int(body["Mask"]["Mask"]),
        ace_type=AceType(ace_type),
        flags=ace["AceFlags"],
        object_type=object_type,
        inherited_object_type=inherited_object_type,
    )


def _encode_ace(entry: AccessControlEntry) -> ldaptypes.ACE:
    if entry.raw is not None:
        return ldaptypes.ACE(data=entry.raw)

    ace = ldaptypes.ACE()
    ace["AceType"] = int(entry.ace_type)
    ace["AceFlags"] = int(entry.flags)

    body = _ACE_BODIES[AceType(entry.ace_type)]()
    body["Mask"] = ldaptypes.ACCESS_MASK()
    body["Mask"]["Mask"] = entry.mask

    if entry.ace_type in _OBJECT_ACE_TYPES:
        flags = 0
        body["ObjectType"] = b""
        body["InheritedObjectType"] = b""
        if entry.object_type is not None:
            flags |= _OBJECT_TYPE_PRESENT
            body["ObjectType"] = entry.object_type.bytes_le
        if entry.inherited_object_type is not None:
            flags |= _INHERITED_OBJECT_TYPE_PRESENT
            body["InheritedObjectType"] = (
                entry.inherited_object_type.bytes_le
            )
        body["Flags"] = flags

    body["Sid"] = ldaptypes.LDAP_SID()
    body["Sid"].fromCanonical(entry.trustee)
    ace["Ace"] = body
    return ace


def decode_security_descriptor(data: bytes) -> SecurityDescriptor:
    """Parse a self-relative security descriptor.

    :param data: raw ``nTSecurityDescriptor`` value
    :raises SecurityDescriptorFormatError: malformed descriptor
    :return: descriptor with its DACL entries in stored order
    """
    if not data:
        raise SecurityDescriptorFormatError("Security descriptor is empty")

    try:
        sd = ldaptypes.SR_SECURITY_DESCRIPTOR(data=data)
        dacl = sd["Dacl"]
        if isinstance(dacl, ldaptypes.ACL):
            aces = [_decode_ace(ace) for ace in dacl.aces]
        else:
            aces = []
    except Exception as err:
        raise SecurityDescriptorFormatError(
            f"Malformed security descriptor: {err}",
        ) from err

    return SecurityDescriptor(
        is_protected=bool(sd["Control"] & SE_DACL_PROTECTED),
        aces=aces,
        raw=bytes(data),
    )


def encode_security_descriptor(descriptor: SecurityDescriptor) -> bytes:
    """Serialize the descriptor, keeping owner, group and SACL of the source.

    :param descriptor: descriptor with the DACL to write
    :raises SecurityDescriptorFormatError: an ACE cannot be encoded
    :return: self-relative descriptor bytes
    """
    try:
        if descriptor.raw:
            sd = ldaptypes.SR_SECURITY_DESCRIPTOR(data=descriptor.raw)
        else:
            sd = _empty_descriptor()

        acl = ldaptypes.ACL()
        acl["AclRevision"] = ACL_REVISION_DS
        acl["Sbz1"] = 0
        acl["Sbz2"] = 0
        acl.aces = [_encode_ace(entry) for entry in descriptor.aces]
        sd["Dacl"] = acl

        control = sd["Control"] | SE_DACL_PRESENT | SE_SELF_RELATIVE
        if descriptor.is_protected:
            control |= SE_DACL_PROTECTED
        else:
            control &= ~SE_DACL_PROTECTED
        sd["Control"] = control

        return sd.getData()
    except Exception as err:
        raise SecurityDescriptorFormatError(
            f"Cannot encode security descriptor: {err}",
        ) from err


def decode_sid(data: bytes) -> str:
    """Canonical ``S-1-...`` form of a binary ``objectSid``."""
    try:
        return ldaptypes.LDAP_SID(data=data).formatCanonical()
    except Exception as err:
        raise SecurityDescriptorFormatError(
            f"Malformed SID: {err}",
        ) from err
