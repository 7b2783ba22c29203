# MIT License
# Copyright (c) 2025 Hashborn

"""
Reward Pool

Stake a reference asset, receive a proportional share of every reward
distribution created while staked, claim any time later.
"""

from .core.pool import RewardPool
from .core.assets import AssetTransfer, InMemoryAssetBank
from .core.events import EventBus
from .protocol.config.params import PoolConfig, get_config
from .protocol.types.common import (
    ClaimPolicy,
    LedgerError,
    InvalidAmount,
    InsufficientBalance,
    TransferFailed,
    ReentrantCall,
    NoStakers,
    BatchTooLarge,
)

__version__ = "0.1.0"

__all__ = [
    "RewardPool",
    "AssetTransfer",
    "InMemoryAssetBank",
    "EventBus",
    "PoolConfig",
    "get_config",
    "ClaimPolicy",
    "LedgerError",
    "InvalidAmount",
    "InsufficientBalance",
    "TransferFailed",
    "ReentrantCall",
    "NoStakers",
    "BatchTooLarge",
]
