# MIT License
# Copyright (c) 2025 Hashborn

import logging
from typing import List, Optional
from .stake_ledger import require_positive
from ..protocol.types.ledger import DistributionEvent

logger = logging.getLogger(__name__)


class DistributionRegistry:
    """
    Append-only log of reward distributions.

    Indices are zero-based and gapless: the index of a new event is always
    the number of events recorded before it, whatever its reward asset.
    """

    def __init__(self, events: List[DistributionEvent] = None):
        self._events: List[DistributionEvent] = events if events is not None else []

    def clone(self) -> 'DistributionRegistry':
        # Events are frozen, sharing them is safe
        return DistributionRegistry(list(self._events))

    def __len__(self) -> int:
        return len(self._events)

    @property
    def count(self) -> int:
        return len(self._events)

    def append(self, reward_asset: str, total_amount: int, distributor: str = "") -> DistributionEvent:
        require_positive(total_amount)
        if not reward_asset:
            raise ValueError("reward_asset must be a non-empty identifier")

        event = DistributionEvent(
            index=len(self._events),
            reward_asset=reward_asset,
            total_amount=total_amount,
            distributor=distributor,
        )
        self._events.append(event)
        logger.debug(f"Registered distribution #{event.index}: {total_amount} {reward_asset}")
        return event

    def get(self, index: int) -> Optional[DistributionEvent]:
        if 0 <= index < len(self._events):
            return self._events[index]
        return None

    def events(self) -> List[DistributionEvent]:
        return list(self._events)
