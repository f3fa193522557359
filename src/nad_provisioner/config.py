"""Configuration data structures for bulk NAD provisioning.

These dataclasses describe the VLAN range, the network attachment flavour and
the job-level knobs. Everything is validated when constructed so that a bad
input is reported once, before a single cluster call is issued, and the
objects are read-only afterwards so they can be shared freely with the
worker threads.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, Mapping, Optional, Union

from .errors import (
    FlagNotApplicableError,
    InvalidConcurrencyError,
    InvalidLabelsError,
    InvalidMtuError,
    InvertedRangeError,
    MalformedRangeError,
    MissingFieldError,
    RangeOutOfBoundsError,
)

LOG = logging.getLogger(__name__)

VLAN_MIN = 1
VLAN_MAX = 4094
MTU_MIN = 68
MTU_MAX = 9000

VLAN_ID_PLACEHOLDER = "<VLAN_ID>"
DEFAULT_NAMESPACE = "default"
DEFAULT_CONCURRENCY = 10
DEFAULT_LOCALNET_DESCRIPTION = f"NAD VLAN {VLAN_ID_PLACEHOLDER} VMs"

_RANGE_RE = re.compile(r"^[0-9]+-[0-9]+$")
_DIGITS_RE = re.compile(r"[0-9]+")


class NetworkKind(Enum):
    """How the attachment is realised on the node."""

    BRIDGE = "bridge"
    LOCALNET = "localnet"


class Operation(Enum):
    CREATE = "create"
    DELETE = "delete"


class OperationMode(Enum):
    """Execution path selected once per job."""

    CREATE_BRIDGE = auto()
    CREATE_LOCALNET = auto()
    DELETE = auto()
    DRY_RUN_PREVIEW = auto()


@dataclass(frozen=True)
class VlanRange:
    """Inclusive 802.1Q VLAN range."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvertedRangeError(
                f"START ({self.start}) cannot be greater than END ({self.end})"
            )
        if self.start < VLAN_MIN or self.end > VLAN_MAX:
            raise RangeOutOfBoundsError(
                f"VLAN IDs must be between {VLAN_MIN} and {VLAN_MAX}"
            )

    @classmethod
    def parse(cls, text: str) -> "VlanRange":
        """Parse ``START-END`` into a validated range."""

        value = (text or "").strip()
        if not _RANGE_RE.match(value):
            raise MalformedRangeError(
                f"Invalid range {text!r}. Use format START-END, ex: 1-4094"
            )
        start, end = value.split("-", 1)
        return cls(int(start), int(end))

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end + 1))

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


def parse_labels(text: str) -> Dict[str, str]:
    """Parse a ``key1=value1,key2=value2`` list into a label mapping.

    Entries without exactly one ``=`` or with an empty key are skipped. The
    whole input is rejected when nothing usable remains.
    """

    labels: Dict[str, str] = {}
    for raw in (text or "").split(","):
        entry = raw.strip()
        if not entry:
            continue
        if entry.count("=") != 1:
            LOG.warning("Skipping malformed label entry %r", entry)
            continue
        key, value = (part.strip() for part in entry.split("=", 1))
        if not key:
            LOG.warning("Skipping label entry %r with empty key", entry)
            continue
        labels[key] = value

    if not labels:
        raise InvalidLabelsError(
            f"Invalid labels {text!r}. Use format key1=value1,key2=value2"
        )
    return labels


def _labels_from_mapping(labels: Mapping[str, str]) -> Dict[str, str]:
    parsed: Dict[str, str] = {}
    for raw_key, raw_value in labels.items():
        key = str(raw_key).strip()
        if not key:
            LOG.warning("Skipping label entry with empty key (value %r)", raw_value)
            continue
        parsed[key] = str(raw_value).strip()

    if not parsed:
        raise InvalidLabelsError("at least one label with a non-empty key is required")
    return parsed


def parse_concurrency(value: Union[int, str, None]) -> int:
    if value is None:
        return DEFAULT_CONCURRENCY
    if isinstance(value, bool):
        raise InvalidConcurrencyError(f"Invalid JOBS: {value!r} (must be a positive number)")
    text = str(value).strip()
    if not _DIGITS_RE.fullmatch(text) or int(text) < 1:
        raise InvalidConcurrencyError(f"Invalid JOBS: {value} (must be a positive number)")
    return int(text)


def parse_mtu(value: Union[int, str, None]) -> Optional[int]:
    """Return ``None`` for an unset MTU so it can be omitted downstream."""

    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    text = str(value).strip()
    if isinstance(value, bool) or not _DIGITS_RE.fullmatch(text):
        raise InvalidMtuError(f"Invalid MTU: {value} (must be between {MTU_MIN} and {MTU_MAX})")
    mtu = int(text)
    if not MTU_MIN <= mtu <= MTU_MAX:
        raise InvalidMtuError(f"Invalid MTU: {value} (must be between {MTU_MIN} and {MTU_MAX})")
    return mtu


@dataclass(frozen=True)
class NetworkConfig:
    """Naming scheme and network flavour shared by every VLAN in a job.

    Attributes
    ----------
    prefix:
        NAD name prefix; the decimal VLAN id is appended unpadded.
    kind:
        Bridge or Localnet attachment.
    namespace:
        Target namespace for every NAD of the job.
    description_template:
        Free text containing ``<VLAN_ID>``. ``None`` selects the kind default.
    bridge:
        Linux bridge name, required to create Bridge NADs.
    mtu:
        Localnet MTU. ``None`` means the field is left out of the payload.
    mac_spoof_check:
        Bridge MAC spoof checking. ``None`` means the default (enabled).
    labels:
        Labels copied verbatim onto every NAD.
    """

    prefix: str
    kind: NetworkKind
    namespace: str = DEFAULT_NAMESPACE
    description_template: Optional[str] = None
    bridge: Optional[str] = None
    mtu: Optional[int] = None
    mac_spoof_check: Optional[bool] = None
    labels: Mapping[str, str] = field(default_factory=dict)

    @property
    def macspoofchk(self) -> bool:
        return True if self.mac_spoof_check is None else self.mac_spoof_check

    @property
    def template(self) -> str:
        if self.description_template:
            return self.description_template
        if self.kind is NetworkKind.BRIDGE:
            return f"VLAN {VLAN_ID_PLACEHOLDER} {self.bridge or ''}".rstrip()
        return DEFAULT_LOCALNET_DESCRIPTION

    def name_for(self, vlan_id: int) -> str:
        return f"{self.prefix}{vlan_id}"

    def describe(self, vlan_id: int) -> str:
        return self.template.replace(VLAN_ID_PLACEHOLDER, str(vlan_id))

    def validate(self, operation: Operation) -> None:
        """Reject field combinations that make no sense for ``operation``."""

        if not self.prefix:
            raise MissingFieldError("a NAD name prefix is required")
        if not self.namespace:
            raise MissingFieldError("a namespace is required")

        if self.mtu is not None:
            if self.kind is not NetworkKind.LOCALNET:
                raise FlagNotApplicableError("MTU can only be set on localnet NADs")
            if operation is Operation.DELETE:
                raise FlagNotApplicableError("MTU is only used when creating NADs")
            if not MTU_MIN <= self.mtu <= MTU_MAX:
                raise InvalidMtuError(
                    f"Invalid MTU: {self.mtu} (must be between {MTU_MIN} and {MTU_MAX})"
                )

        if self.mac_spoof_check is not None:
            if self.kind is not NetworkKind.BRIDGE:
                raise FlagNotApplicableError(
                    "MAC spoof checking can only be set on bridge NADs"
                )
            if operation is Operation.DELETE:
                raise FlagNotApplicableError(
                    "MAC spoof checking is only used when creating NADs"
                )

        if operation is Operation.CREATE:
            if self.kind is NetworkKind.BRIDGE and not self.bridge:
                raise MissingFieldError("a bridge name is required to create bridge NADs")
            if not self.labels:
                raise InvalidLabelsError("at least one label is required to create NADs")


@dataclass(frozen=True)
class JobConfig:
    """Everything one invocation needs; immutable once validated."""

    vlan_range: VlanRange
    network: NetworkConfig
    operation: Operation = Operation.CREATE
    dry_run: bool = False
    concurrency: int = DEFAULT_CONCURRENCY
    debug: bool = False

    def __post_init__(self) -> None:
        if (
            isinstance(self.concurrency, bool)
            or not isinstance(self.concurrency, int)
            or self.concurrency < 1
        ):
            raise InvalidConcurrencyError(
                f"Invalid JOBS: {self.concurrency!r} (must be a positive number)"
            )
        self.network.validate(self.operation)

    @property
    def mode(self) -> OperationMode:
        if self.dry_run:
            return OperationMode.DRY_RUN_PREVIEW
        if self.operation is Operation.DELETE:
            return OperationMode.DELETE
        if self.network.kind is NetworkKind.BRIDGE:
            return OperationMode.CREATE_BRIDGE
        return OperationMode.CREATE_LOCALNET


def build_job(
    *,
    kind: NetworkKind,
    prefix: Optional[str],
    vlan_range: Optional[str],
    labels: Union[str, Mapping[str, str], None] = None,
    namespace: Optional[str] = None,
    description: Optional[str] = None,
    bridge: Optional[str] = None,
    mtu: Union[int, str, None] = None,
    mac_spoof_check: Optional[bool] = None,
    concurrency: Union[int, str, None] = None,
    delete: bool = False,
    dry_run: bool = False,
    debug: bool = False,
) -> JobConfig:
    """Build a :class:`JobConfig` from loosely typed user input.

    Labels are only parsed for create jobs; a delete job never needs them.
    """

    if not prefix:
        raise MissingFieldError("a NAD name prefix is required (-p)")
    if not vlan_range:
        raise MissingFieldError("a VLAN range is required (-r)")

    operation = Operation.DELETE if delete else Operation.CREATE
    parsed_range = VlanRange.parse(vlan_range)
    jobs = parse_concurrency(concurrency)

    parsed_labels: Dict[str, str] = {}
    if operation is Operation.CREATE:
        if labels is None or labels == "":
            raise InvalidLabelsError("at least one label is required to create NADs (-l)")
        if isinstance(labels, Mapping):
            parsed_labels = _labels_from_mapping(labels)
        else:
            parsed_labels = parse_labels(labels)

    network = NetworkConfig(
        prefix=prefix,
        kind=kind,
        namespace=namespace or DEFAULT_NAMESPACE,
        description_template=description or None,
        bridge=bridge or None,
        mtu=parse_mtu(mtu),
        mac_spoof_check=mac_spoof_check,
        labels=parsed_labels,
    )
    return JobConfig(
        vlan_range=parsed_range,
        network=network,
        operation=operation,
        dry_run=dry_run,
        concurrency=jobs,
        debug=debug,
    )
