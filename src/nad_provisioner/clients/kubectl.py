"""Resource client backed by the ``oc`` or ``kubectl`` command line."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Optional, Sequence

from ..errors import ClientError, ClientNotFoundError
from ..manifest import RESOURCE_TYPE, ResourceManifest
from .base import ResourceClient

LOG = logging.getLogger(__name__)

# Preferred first.
CANDIDATE_BINARIES = ("oc", "kubectl")


def detect_binary(candidates: Sequence[str] = CANDIDATE_BINARIES) -> str:
    """Return the first cluster CLI found on ``PATH``."""

    for binary in candidates:
        if shutil.which(binary):
            return binary
    raise ClientNotFoundError(
        "Neither 'oc' nor 'kubectl' found. Install one of them before continuing."
    )


class KubectlClient(ResourceClient):
    """Drive NADs through ``<binary> apply/get/delete``."""

    def __init__(self, binary: Optional[str] = None) -> None:
        self._binary = binary or detect_binary()

    @property
    def name(self) -> str:
        return self._binary

    def _run(self, args: Sequence[str], stdin: Optional[str] = None) -> subprocess.CompletedProcess[str]:
        cmd = [self._binary, *args]
        LOG.debug("Executing: %s", " ".join(cmd))
        return subprocess.run(
            cmd, input=stdin, check=False, text=True, capture_output=True
        )

    def _invoke(
        self, action: str, name: str, namespace: str, args: Sequence[str], stdin: Optional[str] = None
    ) -> subprocess.CompletedProcess[str]:
        try:
            return self._run(args, stdin)
        except OSError as exc:
            raise ClientError(action, name, namespace, str(exc)) from exc

    def exists(self, name: str, namespace: str) -> bool:
        # With --ignore-not-found a missing NAD exits 0 with no output, so any
        # non-zero exit is a transport, auth or API failure.
        result = self._invoke(
            "get", name, namespace,
            ["get", RESOURCE_TYPE, name, "-n", namespace, "--ignore-not-found", "-o", "name"],
        )
        if result.returncode != 0:
            raise ClientError("get", name, namespace, _combined_output(result))
        if not result.stdout.strip():
            LOG.debug("NAD %s/%s not found", namespace, name)
            return False
        return True

    def upsert(self, manifest: ResourceManifest) -> None:
        result = self._invoke(
            "apply", manifest.name, manifest.namespace,
            ["apply", "-f", "-"], stdin=manifest.to_yaml(),
        )
        if result.returncode != 0:
            raise ClientError("apply", manifest.name, manifest.namespace, _combined_output(result))
        LOG.debug("Apply output: %s", result.stdout.strip())

    def delete(self, name: str, namespace: str) -> None:
        result = self._invoke(
            "delete", name, namespace,
            ["delete", RESOURCE_TYPE, name, "-n", namespace],
        )
        if result.returncode != 0:
            raise ClientError("delete", name, namespace, _combined_output(result))
        LOG.debug("Delete output: %s", result.stdout.strip())


def _combined_output(result: subprocess.CompletedProcess[str]) -> str:
    parts = [result.stderr.strip(), result.stdout.strip()]
    return "\n".join(p for p in parts if p)
