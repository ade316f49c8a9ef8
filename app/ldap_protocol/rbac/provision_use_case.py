"""RBAC role provisioning use case.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from time import perf_counter
from typing import Callable
from zoneinfo import ZoneInfo

from .acl_normalizer import ACLNormalizer
from .audit_annotator import AuditAnnotator
from .base import DirectoryGateway
from .constants import AUDIT_NOTE_ATTRIBUTE
from .dataclasses import (
    Identity,
    NormalizationPolicy,
    NormalizationResult,
    PlannedChange,
    ProvisionReport,
    ReportError,
    RoleHandle,
)
from .dry_run import DryRunDirectoryGateway
from .enums import AuditAction, ProvisionMode
from .exceptions import RBACError
from .role_locator import RoleLocator
from .utils import log, validate_container_dn, validate_role_name


@dataclass
class _Pipeline:
    locator: RoleLocator
    annotator: AuditAnnotator
    normalizer: ACLNormalizer
    planned_changes: list[PlannedChange]


class ProvisionRoleUseCase:
    """Create or refresh an RBAC role group and normalize its ACL."""

    def __init__(
        self,
        gateway: DirectoryGateway,
        policy: NormalizationPolicy | None = None,
        note_attribute: str = AUDIT_NOTE_ATTRIBUTE,
        timezone: tzinfo = ZoneInfo("UTC"),
        clock: Callable[[tzinfo], datetime] | None = None,
    ) -> None:
        """Initialize the use case.

        :param gateway: directory gateway performing the real calls
        :param policy: grants asserted on the role ACL
        :param note_attribute: attribute receiving the audit note
        :param timezone: timezone of the audit timestamp
        :param clock: time source, ``datetime.now`` by default
        """
        self._gateway = gateway
        self._policy = policy or NormalizationPolicy()
        self._note_attribute = note_attribute
        self._timezone = timezone
        self._clock = clock

    def _pipeline(self, mode: ProvisionMode) -> _Pipeline:
        gateway = self._gateway
        planned_changes: list[PlannedChange] = []

        if mode == ProvisionMode.DRY_RUN:
            dry_run = DryRunDirectoryGateway(self._gateway)
            gateway, planned_changes = dry_run, dry_run.planned_changes

        return _Pipeline(
            locator=RoleLocator(gateway),
            annotator=AuditAnnotator(
                gateway,
                note_attribute=self._note_attribute,
                timezone=self._timezone,
                clock=self._clock,
            ),
            normalizer=ACLNormalizer(gateway, self._policy),
            planned_changes=planned_changes,
        )

    def _execute(
        self,
        role_name: str,
        mode: ProvisionMode,
        steps: Callable[[_Pipeline], NormalizationResult],
    ) -> ProvisionReport:
        started = perf_counter()
        pipeline = self._pipeline(mode)
        log.info(f"Provisioning role {role_name} ({mode})")

        try:
            result = steps(pipeline)
        except RBACError as err:
            elapsed = timedelta(seconds=perf_counter() - started)
            log.error(
                f"Provisioning role {role_name} failed after {elapsed}: "
                f"{err.kind}: {err}",
            )
            return ProvisionReport(
                role_name=role_name,
                mode=mode,
                success=False,
                elapsed=elapsed,
                error=ReportError.from_exception(err),
                planned_changes=pipeline.planned_changes,
            )

        elapsed = timedelta(seconds=perf_counter() - started)
        log.info(f"Provisioned role {role_name} in {elapsed}")
        return ProvisionReport(
            role_name=role_name,
            mode=mode,
            success=True,
            elapsed=elapsed,
            distinguished_name=result.handle.distinguished_name,
            acl_diff=result.diff,
            planned_changes=pipeline.planned_changes,
        )

    def provision_new(
        self,
        name: str,
        description: str,
        container_dn: str,
        actor: Identity,
        mode: ProvisionMode = ProvisionMode.DRY_RUN,
    ) -> ProvisionReport:
        """Create the role, annotate it and normalize its ACL."""

        def steps(pipeline: _Pipeline) -> NormalizationResult:
            validate_role_name(name)
            validate_container_dn(container_dn)
            handle = pipeline.locator.create_role(
                name,
                description,
                container_dn,
            )
            pipeline.annotator.annotate(handle, actor, AuditAction.CREATED)
            return pipeline.normalizer.normalize(handle)

        return self._execute(name, mode, steps)

    def provision_existing(
        self,
        name: str,
        description: str,
        actor: Identity,
        mode: ProvisionMode = ProvisionMode.DRY_RUN,
    ) -> ProvisionReport:
        """Refresh description and note of a role, normalize its ACL."""

        def steps(pipeline: _Pipeline) -> NormalizationResult:
            validate_role_name(name)
            handle: RoleHandle = pipeline.locator.locate_role(name)
            pipeline.annotator.annotate(
                handle,
                actor,
                AuditAction.UPDATED,
                description=description,
            )
            return pipeline.normalizer.normalize(handle)

        return self._execute(name, mode, steps)
