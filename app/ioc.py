"""DI Provider RBAC provisioning module.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from typing import Iterator

from dishka import Provider, Scope, from_context, provide
from ldap3 import NONE, NTLM, SIMPLE, Connection, Server
from ldap3.core.exceptions import LDAPException

from config import Settings
from ldap_protocol.rbac import (
    DirectoryGateway,
    DirectoryQueryError,
    LDAP3DirectoryGateway,
    ProvisionRoleUseCase,
    log,
)


class MainProvider(Provider):
    """Provider for directory provisioning."""

    scope = Scope.APP
    settings = from_context(provides=Settings, scope=Scope.APP)

    @provide(scope=Scope.APP)
    def get_server(self, settings: Settings) -> Server:
        """Get directory server definition."""
        return Server(
            settings.LDAP_HOST,
            port=settings.LDAP_PORT,
            use_ssl=settings.LDAP_USE_SSL,
            get_info=NONE,
            connect_timeout=settings.LDAP_CONNECT_TIMEOUT,
        )

    @provide(scope=Scope.REQUEST)
    def create_connection(
        self,
        server: Server,
        settings: Settings,
    ) -> Iterator[Connection]:
        """Bind a connection for the request, unbind on exit.

        :raises DirectoryQueryError: server unreachable or bind refused
        """
        password = (
            settings.LDAP_PASSWORD.get_secret_value()
            if settings.LDAP_PASSWORD
            else None
        )
        connection = Connection(
            server,
            user=settings.LDAP_BIND_DN,
            password=password,
            authentication=(
                NTLM if settings.LDAP_AUTHENTICATION == "NTLM" else SIMPLE
            ),
            receive_timeout=settings.LDAP_RECEIVE_TIMEOUT,
        )

        try:
            bound = connection.bind()
        except LDAPException as err:
            raise DirectoryQueryError(
                f"Cannot connect to {settings.LDAP_HOST}: {err}",
            ) from err

        if not bound:
            raise DirectoryQueryError(
                f"Bind as {settings.LDAP_BIND_DN!r} refused: "
                f"{connection.result.get('description')}",
            )

        log.debug(f"Bound to {settings.LDAP_HOST} as {settings.LDAP_BIND_DN}")
        yield connection
        connection.unbind()

    @provide(scope=Scope.REQUEST)
    def get_gateway(
        self,
        connection: Connection,
        settings: Settings,
    ) -> DirectoryGateway:
        """Get ldap3 directory gateway."""
        return LDAP3DirectoryGateway(
            connection,
            base_dn=settings.BASE_DN,
            trustee_search_base=settings.TRUSTEE_SEARCH_BASE,
            group_type=settings.GROUP_TYPE,
        )

    @provide(scope=Scope.REQUEST)
    def get_provision_use_case(
        self,
        gateway: DirectoryGateway,
        settings: Settings,
    ) -> ProvisionRoleUseCase:
        """Get provisioning use case."""
        return ProvisionRoleUseCase(
            gateway,
            policy=settings.normalization_policy,
            note_attribute=settings.AUDIT_NOTE_ATTRIBUTE,
            timezone=settings.TIMEZONE,
        )
