"""Job orchestration for bulk NAD provisioning.

The :class:`Provisioner` picks the execution path once per job (create,
delete or dry-run preview), hands a per-VLAN action to the
:class:`~nad_provisioner.executor.WorkerPool` and turns the collected
outcomes into a :class:`~nad_provisioner.outcomes.JobResult`. Progress and
per-item report lines are written to an output stream so they can be
captured separately from diagnostic logging.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Optional, TextIO

from .clients.base import ResourceClient
from .config import JobConfig, NetworkKind, Operation, OperationMode
from .executor import Action, WorkerPool
from .manifest import build_manifest
from .outcomes import ItemOutcome, JobResult, OutcomeStatus

LOG = logging.getLogger(__name__)

# Dry-run create renders at most this many templates.
PREVIEW_LIMIT = 5


class Provisioner:
    """Create or delete one NAD per VLAN id of a validated job."""

    def __init__(
        self,
        job: JobConfig,
        client: Optional[ResourceClient] = None,
        *,
        stream: Optional[TextIO] = None,
    ) -> None:
        if job.mode is not OperationMode.DRY_RUN_PREVIEW and client is None:
            raise ValueError("a resource client is required unless running a dry run")
        self._job = job
        self._client = client
        self._out = stream or sys.stdout

    @property
    def job(self) -> JobConfig:
        return self._job

    # ------------------------------------------------------------------
    # Per-item actions
    # ------------------------------------------------------------------
    def create_one(self, vlan_id: int) -> ItemOutcome:
        network = self._job.network
        manifest = build_manifest(vlan_id, network)
        LOG.debug("Processing VLAN %d -> NAD name: %s", vlan_id, manifest.name)
        self._client.upsert(manifest)
        return ItemOutcome(
            vlan_id=vlan_id,
            name=manifest.name,
            namespace=manifest.namespace,
            status=OutcomeStatus.CREATED,
            detail=self._created_detail(),
        )

    def delete_one(self, vlan_id: int) -> ItemOutcome:
        network = self._job.network
        name = network.name_for(vlan_id)
        LOG.debug("Processing delete for VLAN %d -> NAD name: %s", vlan_id, name)
        if not self._client.exists(name, network.namespace):
            status = OutcomeStatus.ALREADY_ABSENT
        else:
            self._client.delete(name, network.namespace)
            status = OutcomeStatus.DELETED
        return ItemOutcome(
            vlan_id=vlan_id, name=name, namespace=network.namespace, status=status
        )

    def preview_create_one(self, vlan_id: int) -> ItemOutcome:
        manifest = build_manifest(vlan_id, self._job.network)
        return ItemOutcome(
            vlan_id=vlan_id,
            name=manifest.name,
            namespace=manifest.namespace,
            status=OutcomeStatus.PREVIEWED,
            detail=manifest.to_yaml(),
        )

    def preview_delete_one(self, vlan_id: int) -> ItemOutcome:
        network = self._job.network
        return ItemOutcome(
            vlan_id=vlan_id,
            name=network.name_for(vlan_id),
            namespace=network.namespace,
            status=OutcomeStatus.PREVIEWED,
        )

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------
    def run(self) -> JobResult:
        mode = self._job.mode
        LOG.info(
            "Starting %s job for VLANs %s (%d item(s))",
            mode.name.lower(), self._job.vlan_range, len(self._job.vlan_range),
        )
        if mode is OperationMode.DRY_RUN_PREVIEW:
            result = self._run_preview()
        else:
            result = self._run_live(mode)
        LOG.info("Job finished: %s %s", result.verdict.value, result.summary)
        return result

    def _run_live(self, mode: OperationMode) -> JobResult:
        deleting = mode is OperationMode.DELETE
        self._banner_live(deleting)
        action: Action = self.delete_one if deleting else self.create_one
        outcomes = self._pool(self._job.concurrency).run(self._job.vlan_range, action)
        result = JobResult(outcomes=outcomes)

        prefix = "Delete process" if deleting else "Process"
        self._echo("---")
        if result.failures():
            self._echo(f"{prefix} completed with some errors.")
        else:
            self._echo(f"{prefix} completed successfully!")
        return result

    def _run_preview(self) -> JobResult:
        vlan_range = self._job.vlan_range
        ids: List[int] = list(vlan_range)
        remaining = 0
        if self._job.operation is Operation.DELETE:
            self._echo(
                f"DRY RUN DELETE MODE - Would delete {self._kind_label()} NADs "
                f"from {self._first_last()}"
            )
            self._echo(f"Namespace: '{self._job.network.namespace}'")
            action: Action = self.preview_delete_one
        else:
            self._echo(
                f"DRY RUN MODE - Showing {self._kind_label()} NAD templates "
                f"from {self._first_last()}"
            )
            self._echo(f"Namespace: '{self._job.network.namespace}', {self._settings_line()}")
            if len(ids) > PREVIEW_LIMIT:
                self._echo(
                    f"Showing first {PREVIEW_LIMIT} templates (total range: {vlan_range}):"
                )
                remaining = len(ids) - PREVIEW_LIMIT
                ids = ids[:PREVIEW_LIMIT]
            action = self.preview_create_one

        # A single worker keeps the preview in VLAN order.
        outcomes = self._pool(1).run(ids, action)
        if remaining:
            self._echo(f"... (remaining {remaining} templates would be similar)")
        return JobResult(outcomes=outcomes, previewed_remaining=remaining)

    def _pool(self, limit: int) -> WorkerPool:
        return WorkerPool(
            limit,
            namespace=self._job.network.namespace,
            name_for=self._job.network.name_for,
            on_outcome=self._emit,
        )

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def _emit(self, outcome: ItemOutcome) -> None:
        if outcome.status is OutcomeStatus.PREVIEWED:
            if self._job.operation is Operation.DELETE:
                self._echo(
                    f"Would delete: NAD '{outcome.name}' in namespace '{outcome.namespace}'"
                )
            else:
                self._echo(
                    f"=== {self._kind_label().capitalize()} NAD Template "
                    f"for VLAN {outcome.vlan_id} ==="
                )
                self._echo(outcome.detail.rstrip("\n"))
                self._echo("=== End of Template ===")
                self._echo("")
            return

        self._echo(outcome.report_line())
        if outcome.failed:
            LOG.error("VLAN %d (%s) failed: %s", outcome.vlan_id, outcome.name, outcome.detail)
            if self._job.operation is Operation.CREATE:
                self._explain_failed_create(outcome)

    def _explain_failed_create(self, outcome: ItemOutcome) -> None:
        if not self._job.debug:
            self._echo("   Run with --verbose to see the full manifest and debug info")
            return
        # Manifests are deterministic, so rebuilding yields what was submitted.
        manifest = build_manifest(outcome.vlan_id, self._job.network)
        self._echo(f"[DEBUG] Failed manifest for {manifest.name} (with line numbers):")
        for number, line in enumerate(manifest.to_yaml().splitlines(), start=1):
            self._echo(f"{number:6d}\t{line}")

    def _banner_live(self, deleting: bool) -> None:
        namespace = self._job.network.namespace
        verb = "Deleting" if deleting else "Creating"
        self._echo(
            f"{verb} {self._kind_label()} NADs from {self._first_last()} "
            f"in namespace '{namespace}'..."
        )
        if deleting:
            self._echo(f"Parallel jobs: {self._job.concurrency}")
        else:
            self._echo(f"{self._settings_line()}, Parallel jobs: {self._job.concurrency}")
        self._echo("---")

    def _settings_line(self) -> str:
        network = self._job.network
        if network.kind is NetworkKind.BRIDGE:
            return (
                f"Bridge: {network.bridge}, "
                f"MAC spoof check: {str(network.macspoofchk).lower()}"
            )
        return f"MTU: {network.mtu if network.mtu is not None else 'default'}"

    def _created_detail(self) -> str:
        network = self._job.network
        if network.kind is NetworkKind.BRIDGE:
            return (
                f"bridge '{network.bridge}', "
                f"macspoofchk: {str(network.macspoofchk).lower()}"
            )
        if network.mtu is not None:
            return f"MTU {network.mtu}"
        return "default MTU"

    def _kind_label(self) -> str:
        return self._job.network.kind.value

    def _first_last(self) -> str:
        network = self._job.network
        vlan_range = self._job.vlan_range
        return f"{network.name_for(vlan_range.start)} to {network.name_for(vlan_range.end)}"

    def _echo(self, line: str) -> None:
        self._out.write(f"{line}\n")


def provision(
    job: JobConfig,
    client: Optional[ResourceClient] = None,
    *,
    stream: Optional[TextIO] = None,
) -> JobResult:
    """Run ``job`` end to end and return its result."""

    return Provisioner(job, client, stream=stream).run()
