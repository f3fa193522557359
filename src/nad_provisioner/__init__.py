"""Bulk provisioning of VLAN NetworkAttachmentDefinitions.

This package turns a contiguous VLAN range into one NetworkAttachmentDefinition
per VLAN id and applies or deletes them against a cluster with a bounded
number of workers. It is split into:

* :mod:`nad_provisioner.config` - validated, immutable job configuration;
* :mod:`nad_provisioner.manifest` - the pure manifest builder and its single
  YAML serialisation step;
* :mod:`nad_provisioner.clients` - the resource client interface and the
  ``oc``/``kubectl`` adapter;
* :mod:`nad_provisioner.executor` - the bounded worker pool; and
* :mod:`nad_provisioner.controller` - mode selection, dry-run preview and
  outcome reporting.

Every item is attempted even when others fail; the job verdict is a failure
as soon as one item failed.
"""

from .config import JobConfig, NetworkConfig, NetworkKind, VlanRange, build_job  # noqa: F401
from .controller import Provisioner, provision  # noqa: F401
from .manifest import ResourceManifest, build_manifest  # noqa: F401
from .outcomes import ItemOutcome, JobResult, OutcomeStatus, Verdict  # noqa: F401

__all__ = [
    "ItemOutcome",
    "JobConfig",
    "JobResult",
    "NetworkConfig",
    "NetworkKind",
    "OutcomeStatus",
    "Provisioner",
    "ResourceManifest",
    "Verdict",
    "VlanRange",
    "build_job",
    "build_manifest",
    "provision",
]
