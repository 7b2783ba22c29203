# MIT License
# Copyright (c) 2025 Hashborn

import json
import logging
from typing import Optional
from .stake_ledger import StakeLedger
from .registry import DistributionRegistry
from .claims import ClaimTracker
from ..protocol.types.common import ClaimPolicy
from ..protocol.types.ledger import StakeRecord, DistributionEvent, ClaimCursor, Checkpoint
from ..storage.db import StorageDB

logger = logging.getLogger(__name__)


class LedgerState:
    """
    Everything a pool owns: stakes, distributions and claim cursors.

    Public operations run against a clone() and the pool swaps the clone in
    only when the whole operation succeeded.
    """

    def __init__(self, reference_asset: str, ledger: StakeLedger = None,
                 registry: DistributionRegistry = None, claims: ClaimTracker = None,
                 policy: ClaimPolicy = ClaimPolicy.CURSOR):
        self.reference_asset = reference_asset
        self.ledger = ledger if ledger is not None else StakeLedger()
        self.registry = registry if registry is not None else DistributionRegistry()
        self.claims = claims if claims is not None else ClaimTracker(policy)

    def clone(self) -> 'LedgerState':
        """Creates a copy of the state (for a transaction)."""
        return LedgerState(
            self.reference_asset,
            self.ledger.clone(),
            self.registry.clone(),
            self.claims.clone(),
        )

    def check_invariants(self):
        """Raises ValueError if the ledger is internally inconsistent."""
        total = sum(r.amount for r in self.ledger.records())
        if total != self.ledger.total_staked:
            raise ValueError(f"Stake mismatch: sum={total}, total_staked={self.ledger.total_staked}")
        for i, event in enumerate(self.registry.events()):
            if event.index != i:
                raise ValueError(f"Distribution gap: position {i} holds index {event.index}")

    def persist(self, db: StorageDB):
        """Writes the full ledger state to DB in one commit."""
        items = {
            "meta": json.dumps({
                "reference_asset": self.reference_asset,
                "policy": self.claims.policy.value,
            }),
            "total_checkpoints": json.dumps([c.model_dump() for c in self.ledger.total_checkpoints]),
        }
        for record in self.ledger.records():
            items[f"stake:{record.account}"] = record.model_dump_json()
        for event in self.registry.events():
            items[f"dist:{event.index:012d}"] = event.model_dump_json()
        for cursor in self.claims.cursors():
            items[f"cursor:{cursor.account}"] = cursor.model_dump_json()

        db.set_many(items)
        logger.debug(f"Persisted ledger state ({len(items)} keys)")

    @staticmethod
    def load(db: StorageDB) -> Optional['LedgerState']:
        """Restores a state written by persist(), or None if DB is empty."""
        raw_meta = db.get_state("meta")
        if not raw_meta:
            return None
        meta = json.loads(raw_meta)
        policy = ClaimPolicy(meta["policy"])

        stakes = {}
        for raw in db.get_state_by_prefix("stake:").values():
            record = StakeRecord.model_validate_json(raw)
            stakes[record.account] = record

        # Keys are zero-padded so lexical order is index order
        dist_rows = db.get_state_by_prefix("dist:")
        events = [DistributionEvent.model_validate_json(dist_rows[k]) for k in sorted(dist_rows)]

        cursors = {}
        for raw in db.get_state_by_prefix("cursor:").values():
            cursor = ClaimCursor.model_validate_json(raw)
            cursors[cursor.account] = cursor

        raw_totals = db.get_state("total_checkpoints") or "[]"
        totals = [Checkpoint.model_validate(c) for c in json.loads(raw_totals)]

        state = LedgerState(
            meta["reference_asset"],
            StakeLedger(stakes, totals),
            DistributionRegistry(events),
            ClaimTracker(policy, cursors),
        )
        state.check_invariants()
        logger.info(f"Loaded ledger state: {len(stakes)} stakers, {len(events)} distributions")
        return state
