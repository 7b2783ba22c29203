# MIT License
# Copyright (c) 2025 Hashborn

from pydantic import BaseModel, ConfigDict, Field
from typing import List

class Checkpoint(BaseModel):
    """Value in effect for every distribution index >= `index`."""
    index: int      # Registry length when the value changed
    value: int      # Resulting balance (or total)

class StakeRecord(BaseModel):
    account: str
    amount: int = 0
    checkpoints: List[Checkpoint] = Field(default_factory=list)

class DistributionEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int              # Zero-based, gapless
    reward_asset: str
    total_amount: int
    distributor: str = ""   # Account that funded the distribution

class ClaimCursor(BaseModel):
    account: str
    next_index: int                                  # Cursor policy: next claimable; sparse policy: join floor
    settled: List[int] = Field(default_factory=list)  # Sparse policy only, kept sorted

class ClaimResult(BaseModel):
    """A settled (or claimable) payout for one distribution index."""
    account: str
    index: int
    reward_asset: str
    amount: int
