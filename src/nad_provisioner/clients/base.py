"""Abstract interface for cluster resource clients."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..manifest import ResourceManifest


class ResourceClient(ABC):
    """Capability consumed by the provisioner to talk to the cluster API.

    Implementations raise :class:`~nad_provisioner.errors.ClientError` for
    transport, authentication or API rejections. A missing resource is never
    an error for :meth:`exists`.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short label shown in the run banner."""

    @abstractmethod
    def exists(self, name: str, namespace: str) -> bool:
        """Return whether the NAD ``name`` exists in ``namespace``."""

    @abstractmethod
    def upsert(self, manifest: ResourceManifest) -> None:
        """Create or update the NAD described by ``manifest``."""

    @abstractmethod
    def delete(self, name: str, namespace: str) -> None:
        """Delete the NAD ``name`` from ``namespace``."""
