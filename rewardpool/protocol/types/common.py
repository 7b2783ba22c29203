# MIT License
# Copyright (c) 2025 Hashborn

from enum import Enum

class OpType(str, Enum):
    STAKE = "STAKE"
    UNSTAKE = "UNSTAKE"
    DISTRIBUTE = "DISTRIBUTE"
    CLAIM = "CLAIM"

class ClaimPolicy(str, Enum):
    CURSOR = "cursor"   # single "next claimable index" scalar
    SPARSE = "sparse"   # join floor + set of settled indices

class EventType(str, Enum):
    STAKE_CHANGED = "stake_changed"
    DISTRIBUTION_CREATED = "distribution_created"
    CLAIM_SETTLED = "claim_settled"

class LedgerError(Exception):
    pass

class InvalidAmount(LedgerError):
    pass

class InsufficientBalance(LedgerError):
    pass

class TransferFailed(LedgerError):
    pass

class ReentrantCall(LedgerError):
    pass

class NoStakers(LedgerError):
    pass

class BatchTooLarge(LedgerError):
    pass
