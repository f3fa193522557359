"""YAML job file loader for the nadctl command."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from nad_provisioner.errors import ConfigurationError

JOB_FILE_KEYS = (
    "prefix",
    "range",
    "namespace",
    "labels",
    "description",
    "bridge",
    "mtu",
    "mac_spoof_check",
    "jobs",
)

# Only meaningful when creating; a delete run ignores them from the job file.
CREATE_ONLY_KEYS = frozenset({"labels", "description", "bridge", "mtu", "mac_spoof_check"})


def _normalise_labels(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return {str(k): "" if v is None else str(v) for k, v in value.items()}
    raise ConfigurationError("'labels' must be a key=value string or a mapping")


def _parse_job(data: Mapping[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(data) - set(JOB_FILE_KEYS))
    if unknown:
        raise ConfigurationError(f"Unknown job file key(s): {', '.join(unknown)}")

    job: Dict[str, Any] = {}
    for key in JOB_FILE_KEYS:
        if data.get(key) is None:
            continue
        value = data[key]
        if key == "labels":
            value = _normalise_labels(value)
        elif key == "mac_spoof_check":
            if not isinstance(value, bool):
                raise ConfigurationError("'mac_spoof_check' must be true or false")
        else:
            value = str(value)
        job[key] = value
    return job


def for_operation(defaults: Mapping[str, Any], delete: bool) -> Dict[str, Any]:
    """Drop job-file defaults that do not apply to the requested operation."""

    if not delete:
        return dict(defaults)
    return {k: v for k, v in defaults.items() if k not in CREATE_ONLY_KEYS}


def load_job_file(path: Path) -> Dict[str, Any]:
    """Read job defaults from ``path``.

    The returned mapping only contains keys that were set in the file, so
    callers can layer command line flags on top of it.
    """

    try:
        text = Path(path).read_text()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read job file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in job file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Job file must contain a mapping")
    return _parse_job(data)
