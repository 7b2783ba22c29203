import pytest
from pydantic import ValidationError
from rewardpool.core.registry import DistributionRegistry
from rewardpool.protocol.types.common import InvalidAmount


def test_indices_are_gapless_across_assets():
    registry = DistributionRegistry()
    events = [
        registry.append("RWD", 100),
        registry.append("GEM", 5),
        registry.append("RWD", 7, distributor="funder"),
    ]

    assert [e.index for e in events] == [0, 1, 2]
    assert registry.count == 3
    assert registry.get(1).reward_asset == "GEM"
    assert registry.get(2).distributor == "funder"


def test_unknown_index_returns_none():
    registry = DistributionRegistry()
    registry.append("RWD", 1)
    assert registry.get(1) is None
    assert registry.get(-1) is None


def test_events_are_immutable():
    registry = DistributionRegistry()
    event = registry.append("RWD", 100)
    with pytest.raises(ValidationError):
        event.total_amount = 1


def test_rejects_non_positive_amount():
    registry = DistributionRegistry()
    with pytest.raises(InvalidAmount):
        registry.append("RWD", 0)
    assert registry.count == 0


def test_clone_does_not_share_appends():
    registry = DistributionRegistry()
    registry.append("RWD", 1)
    copy = registry.clone()
    copy.append("RWD", 2)
    assert registry.count == 1
    assert copy.count == 2
