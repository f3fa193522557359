"""nadctl command line runtime."""

from .config import for_operation, load_job_file  # noqa: F401

__all__ = [
    "for_operation",
    "load_job_file",
]
