"""Schemas for RBAC grant configuration.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from functools import reduce
from operator import or_

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import GROUP_OBJECT_CLASS, TrusteeNames
from .enums import AccessRights, AceScope


class TrusteeGrant(BaseModel):
    """One (trustee, rights, scope) grant the normalizer asserts.

    ``rights`` accepts an integer mask, a flag name (``"generic_all"``),
    a ``|`` separated string of names or a list of names.
    """

    model_config = ConfigDict(frozen=True)

    trustee_name: str = Field(min_length=1)
    rights: int = AccessRights.GENERIC_ALL.value
    scope: AceScope = AceScope.ALL
    object_class: str | None = GROUP_OBJECT_CLASS
    is_allow: bool = True

    @field_validator("rights", mode="before")
    @classmethod
    def parse_rights(cls, value: object) -> object:
        """Convert rights names to an access mask."""
        if isinstance(value, str):
            value = [part for part in value.split("|") if part.strip()]

        if isinstance(value, (list, tuple)):
            if not value:
                raise ValueError("at least one access right is required")
            try:
                flags = [
                    AccessRights[str(name).strip().upper()] for name in value
                ]
            except KeyError as err:
                raise ValueError(f"unknown access right {err}") from err
            return int(reduce(or_, flags))

        return value

    @field_validator("rights")
    @classmethod
    def check_rights(cls, value: int) -> int:
        """Reject empty or out of range masks."""
        if not 0 < value <= 0xFFFFFFFF:
            raise ValueError("access mask must be a non-zero 32-bit value")
        return value


DEFAULT_GRANTS: tuple[TrusteeGrant, ...] = (
    TrusteeGrant(trustee_name=TrusteeNames.ENTERPRISE_ADMINS.value),
    TrusteeGrant(trustee_name=TrusteeNames.DOMAIN_ADMINS.value),
)
