# MIT License
# Copyright (c) 2025 Hashborn

"""
Reward Pool

Public entry points: stake, unstake, distribute, claim_rewards.

Each operation is one atomic transaction:
1. The reentrancy guard is entered (nested calls from asset code are rejected)
2. Ledger writes go to a clone of the state
3. Asset transfers run after the ledger writes they depend on
4. On any failure the transfers made by this operation are reverted
   (newest first) and the clone is dropped;
   on success the clone replaces the live state, is persisted (if a DB is
   attached) and buffered notifications are delivered.
"""

import logging
from contextlib import contextmanager
from typing import Iterable, List, Optional, Tuple
from .assets import AssetTransfer
from .events import EventBus
from .guard import ReentrancyGuard
from .settlement import settlement_engine
from .stake_ledger import require_positive
from .state import LedgerState
from ..observability import metrics
from ..protocol.config.params import PoolConfig, get_config
from ..protocol.types.common import (
    OpType, EventType, InvalidAmount, TransferFailed, NoStakers, BatchTooLarge,
)
from ..protocol.types.ledger import DistributionEvent, ClaimCursor, ClaimResult
from ..storage.db import StorageDB

logger = logging.getLogger(__name__)


class RewardPool:
    def __init__(self, reference_asset: str, assets: AssetTransfer,
                 config: PoolConfig = None, db: StorageDB = None, events: EventBus = None):
        if not reference_asset:
            raise ValueError("reference_asset must be a non-empty identifier")
        self.reference_asset = reference_asset
        self.assets = assets
        self.config = config or get_config("default")
        self.db = db
        self.events = events or EventBus()
        self._guard = ReentrancyGuard()
        # (asset, sender, recipient, amount) moves made by the open transaction
        self._journal: List[Tuple[str, str, str, int]] = []

        stored = LedgerState.load(db) if db is not None else None
        if stored is not None:
            if stored.reference_asset != reference_asset:
                raise ValueError(
                    f"Stored pool uses reference asset {stored.reference_asset}, not {reference_asset}"
                )
            if stored.claims.policy != self.config.claim_policy:
                raise ValueError(
                    f"Stored pool uses claim policy {stored.claims.policy.value}, "
                    f"config requests {self.config.claim_policy.value}"
                )
            self.state = stored
        else:
            self.state = LedgerState(reference_asset, policy=self.config.claim_policy)
            logger.info(f"Pool {self.config.pool_id} initialized empty (reference asset {reference_asset})")

        metrics.update_metrics(self.state)

    @property
    def custody(self) -> str:
        return self.config.custody_address

    # --- Operations ---

    def stake(self, account: str, amount: int) -> int:
        """
        Deposits `amount` of the reference asset for `account`.

        Returns:
            The account's new stake

        Raises:
            InvalidAmount: amount not a positive integer or below min_stake
            TransferFailed: the deposit could not be pulled
        """
        with self._transaction(OpType.STAKE) as state:
            require_positive(amount)
            if amount < self.config.min_stake:
                raise InvalidAmount(f"Stake {amount} below minimum {self.config.min_stake}")

            count = state.registry.count
            if not state.ledger.has_record(account):
                # Distributions created before the first stake are never claimable
                state.claims.open(account, count)

            record = state.ledger.deposit(account, amount, count)
            self._pull(self.reference_asset, account, amount)
            self.events.buffer(
                EventType.STAKE_CHANGED,
                account=account, delta=amount, direction="stake", balance=record.amount,
            )

        logger.info(f"{account} staked {amount} {self.reference_asset} (stake {record.amount}, total {self.total_staked})")
        return record.amount

    def unstake(self, account: str, amount: int) -> int:
        """
        Returns `amount` of staked reference asset to `account`.

        Unclaimed rewards stay claimable; they are computed from the stake
        held when each distribution was created.

        Raises:
            InvalidAmount: amount not a positive integer
            InsufficientBalance: amount exceeds the current stake
            TransferFailed: the withdrawal could not be pushed
        """
        with self._transaction(OpType.UNSTAKE) as state:
            require_positive(amount)
            record = state.ledger.withdraw(account, amount, state.registry.count)
            self._push(self.reference_asset, account, amount)
            self.events.buffer(
                EventType.STAKE_CHANGED,
                account=account, delta=amount, direction="unstake", balance=record.amount,
            )

        logger.info(f"{account} unstaked {amount} {self.reference_asset} (stake {record.amount}, total {self.total_staked})")
        return record.amount

    def distribute(self, account: str, reward_asset: str, amount: int) -> DistributionEvent:
        """
        Funds a new distribution of `amount` `reward_asset`, pulled from `account`.

        Anyone may distribute. The reward asset may be the reference asset;
        the funds then add to rewards, never to principal stake.

        Raises:
            InvalidAmount: amount not a positive integer
            NoStakers: nobody is staked, so the reward could never be claimed
            TransferFailed: the reward could not be pulled
        """
        with self._transaction(OpType.DISTRIBUTE) as state:
            require_positive(amount)
            if state.ledger.total_staked == 0:
                raise NoStakers("Cannot distribute while total stake is 0")

            event = state.registry.append(reward_asset, amount, distributor=account)
            self._pull(reward_asset, account, amount)
            self.events.buffer(
                EventType.DISTRIBUTION_CREATED,
                index=event.index, asset=reward_asset, amount=amount, distributor=account,
            )

        logger.info(f"Distribution #{event.index}: {amount} {reward_asset} from {account} over stake {self.total_staked}")
        return event

    def claim_rewards(self, account: str, indices: Iterable[int]) -> List[ClaimResult]:
        """
        Settles the requested distribution indices for `account`, in order.

        Indices that are already settled, predate the account's first stake
        or do not exist yet are skipped silently. A failed payout transfer
        rolls back the whole call.

        Returns:
            One ClaimResult per settled index (amount may be 0)

        Raises:
            BatchTooLarge: more indices than config.max_claim_batch
            TransferFailed: a payout could not be pushed
        """
        indices = list(indices)
        with self._transaction(OpType.CLAIM) as state:
            if len(indices) > self.config.max_claim_batch:
                raise BatchTooLarge(
                    f"Claim batch of {len(indices)} exceeds limit {self.config.max_claim_batch}"
                )

            # All cursor writes happen before any payout leaves custody
            plan = settlement_engine.settle(state, account, indices)
            for result in plan.settled:
                if result.amount > 0:
                    self._push(result.reward_asset, account, result.amount)
                self.events.buffer(
                    EventType.CLAIM_SETTLED,
                    account=account, index=result.index, asset=result.reward_asset, amount=result.amount,
                )

        metrics.claims_settled_total.inc(len(plan.settled))
        metrics.claims_skipped_total.inc(len(plan.skipped))
        for asset, paid in plan.total_by_asset.items():
            metrics.reward_paid_total.labels(asset).inc(paid)

        if plan.settled:
            logger.info(f"{account} settled {len(plan.settled)} distribution(s), skipped {len(plan.skipped)}: {plan.total_by_asset}")
        return plan.settled

    # --- Queries ---

    @property
    def total_staked(self) -> int:
        return self.state.ledger.total_staked

    @property
    def distribution_count(self) -> int:
        return self.state.registry.count

    def stake_of(self, account: str) -> int:
        return self.state.ledger.stake_of(account)

    def get_distribution(self, index: int) -> Optional[DistributionEvent]:
        return self.state.registry.get(index)

    def claim_cursor(self, account: str) -> Optional[ClaimCursor]:
        cursor = self.state.claims.get(account)
        return cursor.model_copy(deep=True) if cursor else None

    def claimable(self, account: str) -> List[ClaimResult]:
        return settlement_engine.preview(self.state, account)

    # --- Internals ---

    @contextmanager
    def _transaction(self, op: OpType):
        with self._guard.guarded(self.config.pool_id):
            tmp_state = self.state.clone()
            self._journal = []
            try:
                yield tmp_state
                if self.db is not None:
                    tmp_state.persist(self.db)
            except Exception as e:
                self._revert_transfers()
                self.events.discard()
                metrics.operation_failures_total.labels(op.value, type(e).__name__).inc()
                logger.warning(f"{op.value} rolled back: {e}")
                raise

            self._journal = []
            self.state = tmp_state
            metrics.operations_total.labels(op.value).inc()
            metrics.update_metrics(self.state)

        # Delivered outside the guard so listeners may call back into the pool
        self.events.flush()

    def _pull(self, asset: str, owner: str, amount: int) -> None:
        try:
            ok = self.assets.transfer_from(asset, owner, self.custody, amount)
        except Exception as e:
            raise TransferFailed(f"Deposit of {amount} {asset} from {owner} failed: {e}") from e
        if not ok:
            raise TransferFailed(f"Deposit of {amount} {asset} from {owner} was refused")
        self._journal.append((asset, owner, self.custody, amount))

    def _push(self, asset: str, recipient: str, amount: int) -> None:
        try:
            ok = self.assets.transfer(asset, self.custody, recipient, amount)
        except Exception as e:
            raise TransferFailed(f"Payout of {amount} {asset} to {recipient} failed: {e}") from e
        if not ok:
            raise TransferFailed(f"Payout of {amount} {asset} to {recipient} was refused")
        self._journal.append((asset, self.custody, recipient, amount))

    def _revert_transfers(self) -> None:
        journal, self._journal = self._journal, []
        for asset, sender, recipient, amount in reversed(journal):
            if not self.assets.revert(asset, sender, recipient, amount):
                logger.error(f"Rollback could not return {amount} {asset} from {recipient} to {sender}")
