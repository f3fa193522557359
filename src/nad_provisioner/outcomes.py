"""Per-VLAN outcomes and the job verdict derived from them."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Sequence


class OutcomeStatus(Enum):
    CREATED = "created"
    DELETED = "deleted"
    ALREADY_ABSENT = "already-absent"
    PREVIEWED = "previewed"
    FAILED = "failed"


class Verdict(Enum):
    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def exit_code(self) -> int:
        return 0 if self is Verdict.SUCCESS else 1


@dataclass(frozen=True)
class ItemOutcome:
    """Result of processing one VLAN id."""

    vlan_id: int
    name: str
    namespace: str
    status: OutcomeStatus
    detail: str = ""

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    def report_line(self) -> str:
        """Human readable, single-line summary suitable for log capture."""

        if self.status is OutcomeStatus.CREATED:
            line = (
                f"SUCCESS: NAD '{self.name}' created in namespace "
                f"'{self.namespace}' with VLAN {self.vlan_id}"
            )
        elif self.status is OutcomeStatus.DELETED:
            line = f"SUCCESS: NAD '{self.name}' deleted from namespace '{self.namespace}'"
        elif self.status is OutcomeStatus.ALREADY_ABSENT:
            line = (
                f"- NAD '{self.name}' not found in namespace '{self.namespace}' "
                "(already deleted or never existed)"
            )
        elif self.status is OutcomeStatus.PREVIEWED:
            line = f"PREVIEW: NAD '{self.name}' in namespace '{self.namespace}' (VLAN {self.vlan_id})"
        else:
            line = (
                f"ERROR: NAD '{self.name}' in namespace '{self.namespace}' "
                f"failed for VLAN {self.vlan_id}"
            )
            if self.detail:
                line = f"{line} | Error details: {_one_line(self.detail)}"
            return line

        if self.detail:
            line = f"{line} ({self.detail})"
        return line


def _one_line(text: str) -> str:
    return " ".join(text.split())


def aggregate(outcomes: Iterable[ItemOutcome]) -> Verdict:
    """Failure if and only if at least one item failed."""

    if any(outcome.failed for outcome in outcomes):
        return Verdict.FAILURE
    return Verdict.SUCCESS


@dataclass
class JobResult:
    """Outcomes of a whole job plus the derived verdict."""

    outcomes: List[ItemOutcome] = field(default_factory=list)
    previewed_remaining: int = 0

    @property
    def verdict(self) -> Verdict:
        return aggregate(self.outcomes)

    @property
    def exit_code(self) -> int:
        return self.verdict.exit_code

    @property
    def summary(self) -> Dict[str, int]:
        counts = Counter(outcome.status.value for outcome in self.outcomes)
        return dict(counts)

    def failures(self) -> Sequence[ItemOutcome]:
        return [outcome for outcome in self.outcomes if outcome.failed]
