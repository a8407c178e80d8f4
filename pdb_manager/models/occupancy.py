"""Occupancy — player counts reported by the game server and the threshold policy."""

from pydantic import BaseModel, ConfigDict, Field


class OccupancySample(BaseModel):
    """A single successful status probe. Never persisted."""

    model_config = ConfigDict(frozen=True)

    online: int = Field(ge=0)
    max: int = Field(ge=0)


class ThresholdPolicy(BaseModel):
    """
    How many players count as "has players".

    A percentage greater than zero takes precedence over the absolute minimum.
    Set once at startup.
    """

    model_config = ConfigDict(frozen=True)

    min_players: int = Field(ge=0, default=1)
    min_players_percent: float = Field(ge=0, le=1, default=0.0)

    @property
    def uses_percentage(self) -> bool:
        return self.min_players_percent > 0
