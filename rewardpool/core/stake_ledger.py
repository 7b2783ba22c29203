# MIT License
# Copyright (c) 2025 Hashborn

import logging
from typing import Dict, List, Optional
from .checkpoints import write_checkpoint, value_at
from ..protocol.types.ledger import StakeRecord, Checkpoint
from ..protocol.types.common import InvalidAmount, InsufficientBalance

logger = logging.getLogger(__name__)


def require_positive(amount) -> int:
    # bool is an int subclass; reject it explicitly
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidAmount(f"Amount must be an integer, got {type(amount).__name__}")
    if amount <= 0:
        raise InvalidAmount(f"Amount must be positive, got {amount}")
    return amount


class StakeLedger:
    """
    Per-account stake balances and the running total.

    Invariant: total_staked == sum(record.amount for every record).
    Every mutation also writes a checkpoint keyed by the current
    distribution count so settlement can read historical balances.
    """

    def __init__(self, stakes: Dict[str, StakeRecord] = None, total_checkpoints: List[Checkpoint] = None):
        self._stakes: Dict[str, StakeRecord] = stakes if stakes is not None else {}
        self._total_checkpoints: List[Checkpoint] = total_checkpoints if total_checkpoints is not None else []
        self.total_staked = sum(r.amount for r in self._stakes.values())

    def clone(self) -> 'StakeLedger':
        stakes = {k: v.model_copy(deep=True) for k, v in self._stakes.items()}
        totals = [c.model_copy() for c in self._total_checkpoints]
        return StakeLedger(stakes, totals)

    def has_record(self, account: str) -> bool:
        return account in self._stakes

    def get_record(self, account: str) -> Optional[StakeRecord]:
        return self._stakes.get(account)

    def stake_of(self, account: str) -> int:
        record = self._stakes.get(account)
        return record.amount if record else 0

    def records(self) -> List[StakeRecord]:
        return list(self._stakes.values())

    @property
    def total_checkpoints(self) -> List[Checkpoint]:
        return self._total_checkpoints

    def deposit(self, account: str, amount: int, distribution_count: int) -> StakeRecord:
        """Increases the account's stake and the total. Creates the record on first deposit."""
        require_positive(amount)
        record = self._stakes.get(account)
        if record is None:
            record = StakeRecord(account=account)
            self._stakes[account] = record

        record.amount += amount
        self.total_staked += amount
        self._checkpoint(record, distribution_count)
        logger.debug(f"Stake of {account} +{amount} -> {record.amount} (total {self.total_staked})")
        return record

    def withdraw(self, account: str, amount: int, distribution_count: int) -> StakeRecord:
        """
        Decreases the account's stake and the total.

        Raises:
            InsufficientBalance: if the account holds less than `amount`
        """
        require_positive(amount)
        current = self.stake_of(account)
        if current < amount:
            raise InsufficientBalance(f"Insufficient stake: {account} has {current}, trying to unstake {amount}")

        # A zero balance is a valid, persistent state; the record is never removed
        record = self._stakes[account]
        record.amount -= amount
        self.total_staked -= amount
        self._checkpoint(record, distribution_count)
        logger.debug(f"Stake of {account} -{amount} -> {record.amount} (total {self.total_staked})")
        return record

    def balance_at(self, account: str, index: int) -> int:
        """Stake the account held when distribution `index` was created."""
        record = self._stakes.get(account)
        if record is None:
            return 0
        return value_at(record.checkpoints, index)

    def total_at(self, index: int) -> int:
        """Total stake when distribution `index` was created."""
        return value_at(self._total_checkpoints, index)

    def _checkpoint(self, record: StakeRecord, distribution_count: int) -> None:
        write_checkpoint(record.checkpoints, distribution_count, record.amount)
        write_checkpoint(self._total_checkpoints, distribution_count, self.total_staked)
