"""Resource client implementations."""

from .base import ResourceClient  # noqa: F401
from .kubectl import KubectlClient, detect_binary  # noqa: F401

__all__ = [
    "KubectlClient",
    "ResourceClient",
    "detect_binary",
]
