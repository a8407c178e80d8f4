"""Tests for the occupancy models and the threshold policy."""

import pytest
from pydantic import ValidationError

from pdb_manager.models.occupancy import OccupancySample, ThresholdPolicy
from pdb_manager.policy.threshold import (
    describe_policy,
    describe_requirement,
    has_players,
    required_players,
)


class TestOccupancySample:
    def test_counts_must_be_non_negative(self):
        with pytest.raises(ValidationError):
            OccupancySample(online=-1, max=10)

    def test_sample_is_immutable(self):
        sample = OccupancySample(online=1, max=10)
        with pytest.raises(ValidationError):
            sample.online = 2


class TestThresholdPolicy:
    def test_defaults(self):
        policy = ThresholdPolicy()
        assert policy.min_players == 1
        assert policy.min_players_percent == 0.0
        assert not policy.uses_percentage

    def test_percent_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            ThresholdPolicy(min_players_percent=1.5)


class TestRequiredPlayers:
    def test_absolute_minimum(self):
        assert required_players(20, ThresholdPolicy(min_players=3)) == 3.0

    def test_percentage_of_max(self):
        policy = ThresholdPolicy(min_players_percent=0.5)
        assert required_players(10, policy) == 5.0

    def test_percentage_is_not_rounded(self):
        policy = ThresholdPolicy(min_players_percent=0.25)
        assert required_players(10, policy) == 2.5

    def test_percentage_takes_precedence(self):
        """MIN_PLAYERS is ignored entirely once a percentage is configured."""
        policy = ThresholdPolicy(min_players=100, min_players_percent=0.1)
        assert required_players(10, policy) == pytest.approx(1.0)

    def test_zero_max_with_percentage_requires_nobody(self):
        # A server reporting max=0 always satisfies a percentage policy.
        # Kept as-is even though max=0 may be a probe anomaly.
        policy = ThresholdPolicy(min_players_percent=0.5)
        assert required_players(0, policy) == 0.0
        assert has_players(OccupancySample(online=0, max=0), policy)


class TestHasPlayers:
    @pytest.mark.parametrize(
        "online,max_players,expected",
        [(0, 20, False), (1, 20, True), (7, 20, True)],
    )
    def test_absolute_threshold(self, online, max_players, expected):
        policy = ThresholdPolicy(min_players=1)
        sample = OccupancySample(online=online, max=max_players)
        assert has_players(sample, policy) is expected

    def test_equality_satisfies(self):
        policy = ThresholdPolicy(min_players=4)
        assert has_players(OccupancySample(online=4, max=10), policy)
        assert not has_players(OccupancySample(online=3, max=10), policy)

    def test_fractional_requirement(self):
        policy = ThresholdPolicy(min_players_percent=0.25)
        assert not has_players(OccupancySample(online=2, max=10), policy)
        assert has_players(OccupancySample(online=3, max=10), policy)

    def test_zero_minimum_always_met(self):
        policy = ThresholdPolicy(min_players=0)
        assert has_players(OccupancySample(online=0, max=10), policy)


class TestDescriptions:
    def test_describe_absolute(self):
        assert describe_requirement(10, ThresholdPolicy(min_players=2)) == "2"
        assert describe_policy(ThresholdPolicy(min_players=2)) == "2 players"

    def test_describe_percentage(self):
        policy = ThresholdPolicy(min_players_percent=0.5)
        assert describe_requirement(10, policy) == "50% [5]"
        assert describe_policy(policy) == "50% of players"
