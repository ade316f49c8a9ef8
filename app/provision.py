"""RBAC role provisioning command line.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

import argparse
import os
from datetime import timedelta
from time import perf_counter
from typing import Any, Sequence

from dishka import Scope, make_container
from pydantic import ValidationError

from config import Settings
from ioc import MainProvider
from ldap_protocol.rbac import (
    DirectoryGateway,
    Identity,
    ProvisionMode,
    ProvisionReport,
    ProvisionRoleUseCase,
    RBACError,
    ReportError,
    log,
    setup_logging,
)

_CONNECTION_FLAGS = {
    "host": "LDAP_HOST",
    "port": "LDAP_PORT",
    "bind_dn": "LDAP_BIND_DN",
    "base_dn": "BASE_DN",
    "trustee_base": "TRUSTEE_SEARCH_BASE",
}


def build_parser() -> argparse.ArgumentParser:
    """Build the ``rbac-provision`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="rbac-provision",
        description="Create or refresh an RBAC role group and its ACL",
    )
    parser.add_argument("--host", help="Directory server host")
    parser.add_argument("--port", type=int, help="Directory server port")
    parser.add_argument("--ssl", action="store_true", help="Use LDAPS")
    parser.add_argument(
        "--bind-dn",
        help="Bind identity, the password is read from LDAP_PASSWORD",
    )
    parser.add_argument("--base-dn", help="Search base for role groups")
    parser.add_argument(
        "--trustee-base",
        help="Search base for trustee groups",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Perform the writes, default is a dry run",
    )
    parser.add_argument(
        "--actor",
        help="Identity recorded in the audit note, default is the bound one",
    )
    parser.add_argument("--log-dir", help="Directory for log files")

    commands = parser.add_subparsers(dest="command", required=True)

    new = commands.add_parser("new", help="Create a new role")
    new.add_argument("--name", required=True, help="Role group name")
    new.add_argument("--description", required=True, help="Description")
    new.add_argument("--path", required=True, help="Container DN")

    existing = commands.add_parser("existing", help="Refresh a role")
    existing.add_argument("--name", required=True, help="Role group name")
    existing.add_argument("--description", required=True, help="Description")

    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from environ, overridden by connection flags."""
    overrides: dict[str, Any] = {
        key: getattr(args, flag)
        for flag, key in _CONNECTION_FLAGS.items()
        if getattr(args, flag) is not None
    }
    if args.ssl:
        overrides["LDAP_USE_SSL"] = True
    if args.log_dir:
        overrides["LOG_DIR"] = args.log_dir

    return Settings(**(dict(os.environ) | overrides))


def render_report(report: ProvisionReport) -> None:
    """Log the provisioning outcome."""
    status = "succeeded" if report.success else "failed"
    log.info(
        f"Role {report.role_name} {status} in {report.elapsed} "
        f"({report.mode})",
    )

    if report.distinguished_name:
        log.info(f"Distinguished name: {report.distinguished_name}")

    if report.acl_diff is not None:
        for ace in report.acl_diff.to_add:
            log.info(f"ACE added: {ace.describe()}")
        for ace in report.acl_diff.to_remove:
            log.info(f"ACE removed: {ace.describe()}")

    for change in report.planned_changes:
        log.info(f"Planned: {change}")

    if report.error is not None:
        log.error(
            f"{report.error.kind} [{report.error.code}]: "
            f"{report.error.message}",
        )


def run(args: argparse.Namespace, settings: Settings) -> ProvisionReport:
    """Provision the role described by the parsed arguments.

    Connection and actor failures are reported like provisioning ones.
    """
    mode = ProvisionMode.APPLY if args.apply else ProvisionMode.DRY_RUN
    started = perf_counter()
    container = make_container(MainProvider(), context={Settings: settings})

    try:
        with container(scope=Scope.REQUEST) as request_container:
            use_case = request_container.get(ProvisionRoleUseCase)
            actor_name = args.actor or (
                request_container.get(DirectoryGateway).who_am_i()
                or settings.LDAP_BIND_DN
                or "anonymous"
            )
            actor = Identity(actor_name)

            if args.command == "new":
                return use_case.provision_new(
                    args.name,
                    args.description,
                    args.path,
                    actor,
                    mode,
                )

            return use_case.provision_existing(
                args.name,
                args.description,
                actor,
                mode,
            )
    except RBACError as err:
        return ProvisionReport(
            role_name=args.name,
            mode=mode,
            success=False,
            elapsed=timedelta(seconds=perf_counter() - started),
            error=ReportError.from_exception(err),
        )
    finally:
        container.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line, return the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as err:
        parser.error(str(err))

    handler_id = setup_logging(settings.LOG_DIR, settings.DEBUG)

    try:
        report = run(args, settings)
        render_report(report)
        return 0 if report.success else 1
    finally:
        log.remove(handler_id)
