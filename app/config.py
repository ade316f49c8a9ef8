"""Module with settings.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

import json
import os
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, SecretStr, field_validator

from ldap_protocol.rbac import (
    DEFAULT_GRANTS,
    NormalizationPolicy,
    TrusteeGrant,
)
from ldap_protocol.rbac.constants import (
    AUDIT_NOTE_ATTRIBUTE,
    GLOBAL_SECURITY_GROUP_TYPE,
)


class Settings(BaseModel):
    """Settings of the directory connection and provisioning policy."""

    DEBUG: bool = False

    LDAP_HOST: str
    LDAP_PORT: int = 389
    LDAP_USE_SSL: bool = False
    LDAP_BIND_DN: str | None = None
    LDAP_PASSWORD: SecretStr | None = None
    LDAP_AUTHENTICATION: Literal["SIMPLE", "NTLM"] = "SIMPLE"
    LDAP_CONNECT_TIMEOUT: int | None = None
    LDAP_RECEIVE_TIMEOUT: int | None = None

    BASE_DN: str
    TRUSTEE_SEARCH_BASE: str | None = None

    AUDIT_NOTE_ATTRIBUTE: str = AUDIT_NOTE_ATTRIBUTE
    GROUP_TYPE: int = GLOBAL_SECURITY_GROUP_TYPE

    RBAC_GRANTS: tuple[TrusteeGrant, ...] = DEFAULT_GRANTS
    ACL_REMOVE_EXTRANEOUS: bool = True

    TIMEZONE: ZoneInfo = Field(ZoneInfo("UTC"), alias="TZ")
    LOG_DIR: str = "logs"

    @field_validator("RBAC_GRANTS", mode="before")
    def load_grants(cls, grants: object) -> object:  # noqa: N805
        """Load grants from a JSON list."""
        if isinstance(grants, (str, bytes)):
            try:
                return json.loads(grants)
            except json.JSONDecodeError as err:
                raise ValueError(f"RBAC_GRANTS is not JSON: {err}") from err
        return grants

    @field_validator("RBAC_GRANTS")
    def check_grants(  # noqa: N805
        cls,
        grants: tuple[TrusteeGrant, ...],
    ) -> tuple[TrusteeGrant, ...]:
        """Require at least one grant."""
        if not grants:
            raise ValueError("RBAC_GRANTS must hold at least one grant")
        return grants

    @field_validator("TIMEZONE", mode="before")
    def create_tz(cls, tz: str) -> ZoneInfo:  # noqa: N805
        """Get timezone from a string."""
        try:
            value = ZoneInfo(tz)
        except ZoneInfoNotFoundError as err:
            raise ValueError(str(err)) from err
        except TypeError:
            return tz  # type: ignore
        else:
            return value

    @property
    def normalization_policy(self) -> NormalizationPolicy:
        """Grants and pruning mode for the ACL normalizer."""
        return NormalizationPolicy(
            grants=tuple(self.RBAC_GRANTS),
            remove_extraneous=self.ACL_REMOVE_EXTRANEOUS,
        )

    @classmethod
    def from_os(cls) -> "Settings":
        """Get cls from environ."""
        return Settings(**os.environ)
