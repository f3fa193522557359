"""Bounded worker pool that runs one action per VLAN id."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, Optional

from .errors import ClientError
from .outcomes import ItemOutcome, OutcomeStatus

LOG = logging.getLogger(__name__)

Action = Callable[[int], ItemOutcome]
OutcomeCallback = Callable[[ItemOutcome], None]
NameResolver = Callable[[int], str]


class WorkerPool:
    """Dispatch every id exactly once with at most ``limit`` in flight.

    One action failing never cancels or skips another; :meth:`run` returns
    only once every dispatched action has finished and been recorded.
    """

    def __init__(
        self,
        limit: int,
        *,
        namespace: str = "",
        name_for: Optional[NameResolver] = None,
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> None:
        if limit < 1:
            raise ValueError(f"worker limit must be >= 1, got {limit}")
        self._limit = limit
        self._namespace = namespace
        self._name_for = name_for or str
        self._on_outcome = on_outcome

    @property
    def limit(self) -> int:
        return self._limit

    def run(self, ids: Iterable[int], action: Action) -> List[ItemOutcome]:
        outcomes: List[ItemOutcome] = []
        # Threads rather than processes: the actions only wait on the cluster API.
        with ThreadPoolExecutor(
            max_workers=self._limit, thread_name_prefix="nad-worker"
        ) as pool:
            futures: Dict[Future, int] = {
                pool.submit(self._guarded, action, vlan_id): vlan_id for vlan_id in ids
            }
            for future in as_completed(futures):
                outcome = future.result()
                outcomes.append(outcome)
                if self._on_outcome is not None:
                    self._on_outcome(outcome)
        LOG.debug("Worker pool finished %d item(s)", len(outcomes))
        return outcomes

    def _guarded(self, action: Action, vlan_id: int) -> ItemOutcome:
        try:
            return action(vlan_id)
        except ClientError as exc:
            return self._failure(vlan_id, str(exc))
        except Exception as exc:
            LOG.exception("Unexpected error while processing VLAN %d", vlan_id)
            return self._failure(vlan_id, f"{type(exc).__name__}: {exc}")

    def _failure(self, vlan_id: int, detail: str) -> ItemOutcome:
        return ItemOutcome(
            vlan_id=vlan_id,
            name=self._name_for(vlan_id),
            namespace=self._namespace,
            status=OutcomeStatus.FAILED,
            detail=detail,
        )


def run(
    ids: Iterable[int],
    limit: int,
    action: Action,
    *,
    on_outcome: Optional[OutcomeCallback] = None,
) -> List[ItemOutcome]:
    """Convenience wrapper around :class:`WorkerPool`."""

    return WorkerPool(limit, on_outcome=on_outcome).run(ids, action)
