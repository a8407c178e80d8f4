"""
Process configuration — read once from the environment at startup.

Every field carries the environment variable it is read from as its alias.
Anything missing or malformed is a fatal startup error.
"""

from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pdb_manager.models.occupancy import ThresholdPolicy
from pdb_manager.models.reconciler import ReconcilerConfig

DEFAULT_UPDATE_INTERVAL_SECONDS = 10
DEFAULT_MIN_PLAYERS = 1
DEFAULT_PROBE_TIMEOUT_SECONDS = 10.0
DEFAULT_LOG_LEVEL = "info"

LOG_LEVEL_VARS = ("LOG_LEVEL", "RUST_LOG")


class ConfigError(Exception):
    """Raised when the environment does not describe a runnable process."""
    pass


def log_level_from_env(environ: Mapping[str, str]) -> str:
    """Resolve the log level name, preferring LOG_LEVEL over RUST_LOG."""
    for var in LOG_LEVEL_VARS:
        value = environ.get(var, "").strip()
        if value:
            return value.lower()
    return DEFAULT_LOG_LEVEL


class AppConfig(BaseModel):
    """Validated settings for one manager process."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    update_interval_seconds: int = Field(
        alias="UPDATE_INTERVAL", ge=0, default=DEFAULT_UPDATE_INTERVAL_SECONDS
    )
    pod_namespace: str = Field(alias="POD_NAMESPACE", min_length=1)
    pdb_name: str = Field(alias="PDB_NAME", min_length=1)
    min_players: int = Field(alias="MIN_PLAYERS", ge=0, default=DEFAULT_MIN_PLAYERS)
    min_players_percent: float = Field(
        alias="MIN_PLAYERS_PERCENT", ge=0, le=1, default=0.0
    )
    server_host: str = Field(alias="SERVER_HOST", min_length=1)
    server_port: int = Field(alias="SERVER_PORT", ge=0, le=65535)
    probe_timeout_seconds: float = Field(
        alias="PROBE_TIMEOUT", gt=0, default=DEFAULT_PROBE_TIMEOUT_SECONDS
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "AppConfig":
        """
        Build the configuration from an environment mapping.

        Raises ConfigError naming every offending variable.
        """
        raw = {}
        for field in cls.model_fields.values():
            if field.alias and field.alias in environ:
                raw[field.alias] = environ[field.alias]

        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            problems = []
            for error in exc.errors():
                name = ".".join(str(part) for part in error["loc"]) or "<root>"
                problem = f"{name}: {error['msg']}"
                if name in environ:
                    problem += f" (got {environ[name]!r})"
                problems.append(problem)
            raise ConfigError(
                "Invalid configuration: " + "; ".join(problems)
            ) from exc

    def threshold_policy(self) -> ThresholdPolicy:
        return ThresholdPolicy(
            min_players=self.min_players,
            min_players_percent=self.min_players_percent,
        )

    def reconciler_config(self) -> ReconcilerConfig:
        return ReconcilerConfig(update_interval_seconds=self.update_interval_seconds)
