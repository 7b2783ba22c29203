# MIT License
# Copyright (c) 2025 Hashborn

import copy
import os
from typing import Dict
from ..types.common import ClaimPolicy

# Global Constants
DEFAULT_POOL_ID = "rewardpool"
DEFAULT_CUSTODY = "pool1custody0000000000000000000000000000"
PRESET_ENV = "REWARDPOOL_PRESET"

class PoolConfig:
    def __init__(self,
                 pool_id: str = DEFAULT_POOL_ID,
                 custody_address: str = DEFAULT_CUSTODY,
                 # Practical ceiling on indices per claim_rewards call
                 max_claim_batch: int = 1024,
                 claim_policy: ClaimPolicy = ClaimPolicy.CURSOR,
                 min_stake: int = 1):
        if max_claim_batch <= 0:
            raise ValueError("max_claim_batch must be positive")
        if min_stake <= 0:
            raise ValueError("min_stake must be positive")
        self.pool_id = pool_id
        self.custody_address = custody_address
        self.max_claim_batch = max_claim_batch
        self.claim_policy = ClaimPolicy(claim_policy)
        self.min_stake = min_stake

    def __repr__(self) -> str:
        return (f"PoolConfig(pool_id={self.pool_id!r}, policy={self.claim_policy.value}, "
                f"max_claim_batch={self.max_claim_batch}, min_stake={self.min_stake})")

PRESETS: Dict[str, PoolConfig] = {
    "default": PoolConfig(),
    "sparse": PoolConfig(
        pool_id="rewardpool-sparse",
        claim_policy=ClaimPolicy.SPARSE,
    ),
    "strict": PoolConfig(
        pool_id="rewardpool-strict",
        max_claim_batch=64,
        min_stake=1_000,
    ),
}

def get_config(name: str = None) -> PoolConfig:
    """Returns a copy of a preset by name, falling back to $REWARDPOOL_PRESET, then 'default'."""
    name = name or os.environ.get(PRESET_ENV, "default")
    if name not in PRESETS:
        raise ValueError(f"Unknown preset '{name}' (available: {', '.join(sorted(PRESETS))})")
    return copy.copy(PRESETS[name])
