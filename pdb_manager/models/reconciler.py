"""Reconciler configuration and per-cycle outcome."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from pdb_manager.models.occupancy import OccupancySample


class ReconcilerConfig(BaseModel):
    """Configuration for the reconciliation loop."""

    update_interval_seconds: float = Field(ge=0, default=10)


class CycleStatus(str, Enum):
    PROBE_FAILED = "probe_failed"
    UNCHANGED = "unchanged"
    PATCHED = "patched"
    PATCH_FAILED = "patch_failed"


class CycleOutcome(BaseModel):
    """What a single reconciliation cycle observed and did."""

    status: CycleStatus
    sample: Optional[OccupancySample] = None
    required: Optional[float] = None
    has_players: Optional[bool] = None
    last_has_players: bool                  # Last-known state after the cycle
    error: Optional[str] = None
