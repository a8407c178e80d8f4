"""
Threshold Policy — decides whether an occupancy sample counts as "has players".

Behavioral Contract:
- A percentage policy (> 0) always wins over the absolute minimum
- The percentage is applied to the reported maximum without rounding
- Equality satisfies the threshold
- A percentage policy against max == 0 requires 0 players and is always met
"""

from pdb_manager.models.occupancy import OccupancySample, ThresholdPolicy


def required_players(max_players: int, policy: ThresholdPolicy) -> float:
    """Number of online players needed for the condition to hold."""
    if policy.uses_percentage:
        return policy.min_players_percent * max_players
    return float(policy.min_players)


def has_players(sample: OccupancySample, policy: ThresholdPolicy) -> bool:
    """Evaluate the has-players condition for a sample."""
    return float(sample.online) >= required_players(sample.max, policy)


def describe_requirement(max_players: int, policy: ThresholdPolicy) -> str:
    """Human-readable requirement, e.g. "50% [5]" or "1"."""
    if policy.uses_percentage:
        required = required_players(max_players, policy)
        return f"{policy.min_players_percent * 100:.0f}% [{int(required)}]"
    return str(policy.min_players)


def describe_policy(policy: ThresholdPolicy) -> str:
    if policy.uses_percentage:
        return f"{policy.min_players_percent * 100:.0f}% of players"
    return f"{policy.min_players} players"
