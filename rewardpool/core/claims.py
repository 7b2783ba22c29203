# MIT License
# Copyright (c) 2025 Hashborn

"""
Claim Tracker

Per-account record of which distributions have been settled.

Two policies are supported:

- CURSOR: `next_index` is one past the highest settled index. Index i is
  claimable iff next_index <= i < distribution_count, and settling it moves
  the cursor to i + 1. Submitting indices out of order forfeits any lower
  index the cursor jumps over.
- SPARSE: `next_index` is the join floor and never moves; settled indices
  are kept in a sorted list. Index i is claimable iff
  next_index <= i < distribution_count and i has not been settled yet, so
  claims can arrive in any order.

In both cases the floor is the distribution count at the account's first
stake, which excludes distributions created before the account joined.
"""

import logging
from bisect import bisect_left, insort
from typing import Dict, Optional
from ..protocol.types.common import ClaimPolicy
from ..protocol.types.ledger import ClaimCursor

logger = logging.getLogger(__name__)


class ClaimTracker:
    def __init__(self, policy: ClaimPolicy = ClaimPolicy.CURSOR, cursors: Dict[str, ClaimCursor] = None):
        self.policy = ClaimPolicy(policy)
        self._cursors: Dict[str, ClaimCursor] = cursors if cursors is not None else {}

    def clone(self) -> 'ClaimTracker':
        cursors = {k: v.model_copy(deep=True) for k, v in self._cursors.items()}
        return ClaimTracker(self.policy, cursors)

    def open(self, account: str, distribution_count: int) -> ClaimCursor:
        """Creates the account's cursor at its first stake. Existing cursors are left untouched."""
        cursor = self._cursors.get(account)
        if cursor is None:
            cursor = ClaimCursor(account=account, next_index=distribution_count)
            self._cursors[account] = cursor
            logger.debug(f"Opened claim cursor for {account} at {distribution_count}")
        return cursor

    def get(self, account: str) -> Optional[ClaimCursor]:
        return self._cursors.get(account)

    def cursors(self):
        return list(self._cursors.values())

    def is_claimable(self, account: str, index: int, distribution_count: int) -> bool:
        cursor = self._cursors.get(account)
        if cursor is None:
            return False
        if index < cursor.next_index or index >= distribution_count:
            return False
        if self.policy == ClaimPolicy.SPARSE:
            return not self._is_settled(cursor, index)
        return True

    def mark_settled(self, account: str, index: int) -> None:
        cursor = self._cursors[account]
        if self.policy == ClaimPolicy.SPARSE:
            insort(cursor.settled, index)
        else:
            # Never decreases
            cursor.next_index = max(cursor.next_index, index + 1)

    @staticmethod
    def _is_settled(cursor: ClaimCursor, index: int) -> bool:
        pos = bisect_left(cursor.settled, index)
        return pos < len(cursor.settled) and cursor.settled[pos] == index
