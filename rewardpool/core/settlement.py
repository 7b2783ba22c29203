# MIT License
# Copyright (c) 2025 Hashborn

"""
Settlement Engine

Turns a claim request into a list of payouts.

For each requested index, in the order supplied:
1. Skip it (no state change) if the claim tracker says it is not claimable:
   already settled, older than the account's join floor, or not created yet.
2. Otherwise mark it settled and compute
       floor(total_amount * stake_at(index) / total_at(index))
   from the stake checkpoints in effect when the distribution was created.

A skipped index never aborts the batch. Rounding dust (at most one unit per
staker per distribution) stays in custody and is not redistributed.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List
from ..protocol.types.ledger import ClaimResult

logger = logging.getLogger(__name__)


def compute_payout(total_amount: int, stake: int, total_stake: int) -> int:
    """Proportional share with floor division. A zero total pays nothing."""
    if total_stake <= 0 or stake <= 0:
        return 0
    return (total_amount * stake) // total_stake


@dataclass
class SettlementPlan:
    """Outcome of settling one claim batch against a ledger state."""
    account: str
    settled: List[ClaimResult] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)

    @property
    def total_by_asset(self):
        totals = {}
        for result in self.settled:
            totals[result.reward_asset] = totals.get(result.reward_asset, 0) + result.amount
        return totals


class SettlementEngine:
    """
    Reads StakeLedger checkpoints and DistributionRegistry events, writes
    ClaimTracker. Performs no transfers itself; the pool pays the plan out
    after every ledger write has been applied.
    """

    def settle(self, state, account: str, indices: Iterable[int]) -> SettlementPlan:
        """
        Settles `indices` for `account` on `state` (mutates its claim tracker).

        Args:
            state: LedgerState to settle against (a transaction-local clone)
            account: Claiming account
            indices: Distribution indices in caller order

        Returns:
            SettlementPlan with one ClaimResult per settled index
        """
        plan = SettlementPlan(account=account)
        count = state.registry.count

        for index in indices:
            if not isinstance(index, int) or isinstance(index, bool):
                logger.debug(f"Skipping non-integer claim index {index!r} for {account}")
                plan.skipped.append(index)
                continue

            if not state.claims.is_claimable(account, index, count):
                logger.debug(f"Skipping claim index {index} for {account} (settled, pre-join or future)")
                plan.skipped.append(index)
                continue

            state.claims.mark_settled(account, index)
            plan.settled.append(self.quote(state, account, index))

        return plan

    def quote(self, state, account: str, index: int) -> ClaimResult:
        """Payout owed to `account` for distribution `index`, ignoring claim status."""
        event = state.registry.get(index)
        if event is None:
            raise IndexError(f"Unknown distribution index {index}")
        stake = state.ledger.balance_at(account, index)
        total = state.ledger.total_at(index)
        amount = compute_payout(event.total_amount, stake, total)
        return ClaimResult(
            account=account,
            index=index,
            reward_asset=event.reward_asset,
            amount=amount,
        )

    def preview(self, state, account: str) -> List[ClaimResult]:
        """Everything `account` could settle right now, in index order. Read-only."""
        cursor = state.claims.get(account)
        if cursor is None:
            return []
        count = state.registry.count
        return [
            self.quote(state, account, index)
            for index in range(cursor.next_index, count)
            if state.claims.is_claimable(account, index, count)
        ]


# Global engine instance
settlement_engine = SettlementEngine()
