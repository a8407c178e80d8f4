"""PDB manager data models."""

from pdb_manager.models.config import AppConfig, ConfigError
from pdb_manager.models.occupancy import OccupancySample, ThresholdPolicy
from pdb_manager.models.reconciler import CycleOutcome, CycleStatus, ReconcilerConfig

__all__ = [
    "AppConfig",
    "ConfigError",
    "CycleOutcome",
    "CycleStatus",
    "OccupancySample",
    "ReconcilerConfig",
    "ThresholdPolicy",
]
