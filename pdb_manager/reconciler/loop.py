"""
Reconciler Loop — keeps the disruption budget in step with server occupancy.

States:
  ALLOWED (no players, maxUnavailable=1) <-> BLOCKED (players, maxUnavailable=0)

Each cycle: probe → evaluate threshold → patch only when the condition changed.
The last-known condition is committed only after a confirmed patch, so a
failed write is retried on the next tick.
"""

import asyncio
from typing import Optional, Protocol

import structlog

from pdb_manager.budget.client import BLOCK_EVICTIONS, BudgetError
from pdb_manager.models.occupancy import OccupancySample, ThresholdPolicy
from pdb_manager.models.reconciler import CycleOutcome, CycleStatus, ReconcilerConfig
from pdb_manager.policy.threshold import (
    describe_requirement,
    has_players as evaluate_has_players,
    required_players,
)
from pdb_manager.probe.status import ProbeError

log = structlog.get_logger(__name__)


class Prober(Protocol):
    async def probe(self) -> OccupancySample: ...


class BudgetClient(Protocol):
    name: str

    async def read_allowance(self) -> Optional[int]: ...

    async def patch_allowance(self, has_players: bool) -> int: ...


class PdbReconciler:
    """
    Owns the last-known has-players state.

    Only the task running `run_async` (or calling `reconcile_once`) touches
    that state. Cycles never overlap.
    """

    def __init__(
        self,
        prober: Prober,
        budget: BudgetClient,
        policy: ThresholdPolicy,
        config: Optional[ReconcilerConfig] = None,
        last_has_players: bool = False,
    ):
        self.prober = prober
        self.budget = budget
        self.policy = policy
        self.config = config or ReconcilerConfig()

        self._last_has_players = last_has_players
        self._running = False
        self.cycle_count = 0

    @property
    def last_has_players(self) -> bool:
        return self._last_has_players

    @property
    def state(self) -> str:
        return "blocked" if self._last_has_players else "allowed"

    @property
    def status(self) -> str:
        """Current reconciler status."""
        return "running" if self._running else "stopped"

    async def seed(self) -> bool:
        """
        Seed the last-known state from the budget's current allowance.

        maxUnavailable == 0 means players were last recorded present;
        anything else, including an unreadable object, seeds False.
        """
        allowance = await self.budget.read_allowance()
        self._last_has_players = allowance == BLOCK_EVICTIONS
        log.info(
            "state_seeded",
            pdb=self.budget.name,
            max_unavailable=allowance,
            has_players=self._last_has_players,
        )
        return self._last_has_players

    async def reconcile_once(self) -> CycleOutcome:
        """Run a single reconciliation cycle."""
        self.cycle_count += 1

        try:
            sample = await self.prober.probe()
        except ProbeError as exc:
            log.warning("probe_failed", error=str(exc))
            return self._outcome(CycleStatus.PROBE_FAILED, error=str(exc))

        required = required_players(sample.max, self.policy)
        has_players = evaluate_has_players(sample, self.policy)
        log.debug(
            "condition_met" if has_players else "condition_unmet",
            online=sample.online,
            max=sample.max,
            need=describe_requirement(sample.max, self.policy),
        )

        if has_players == self._last_has_players:
            log.debug("state_unchanged", has_players=has_players)
            return self._outcome(
                CycleStatus.UNCHANGED,
                sample=sample,
                required=required,
                has_players=has_players,
            )

        try:
            allowance = await self.budget.patch_allowance(has_players)
        except BudgetError as exc:
            log.warning("patch_failed", pdb=self.budget.name, error=str(exc))
            return self._outcome(
                CycleStatus.PATCH_FAILED,
                sample=sample,
                required=required,
                has_players=has_players,
                error=str(exc),
            )

        # Commit only after the write is confirmed
        self._last_has_players = has_players
        log.info(
            "state_changed",
            pdb=self.budget.name,
            state=self.state,
            max_unavailable=allowance,
            online=sample.online,
        )
        return self._outcome(
            CycleStatus.PATCHED,
            sample=sample,
            required=required,
            has_players=has_players,
        )

    def _outcome(self, status: CycleStatus, **fields) -> CycleOutcome:
        return CycleOutcome(
            status=status,
            last_has_players=self._last_has_players,
            **fields,
        )

    async def _run_cycle(self) -> Optional[CycleOutcome]:
        """One broken cycle never stops the loop."""
        try:
            return await self.reconcile_once()
        except Exception:
            log.exception("cycle_failed")
            return None

    async def run_async(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """
        Reconcile immediately, then once per interval until stop_event is set.

        The stop event is only observed between cycles.
        """
        self._running = True
        if stop_event is None:
            stop_event = asyncio.Event()

        try:
            await self._run_cycle()
            while not stop_event.is_set():
                try:
                    await asyncio.wait_for(
                        stop_event.wait(),
                        timeout=self.config.update_interval_seconds,
                    )
                except asyncio.TimeoutError:
                    # A zero interval times out before the event is checked
                    if not stop_event.is_set():
                        await self._run_cycle()
            log.info("shutting_down")
        finally:
            self._running = False
