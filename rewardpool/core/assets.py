# MIT License
# Copyright (c) 2025 Hashborn

"""
Asset Transfer Collaborators

The pool never moves balances itself. It asks an AssetTransfer to pull
funds into custody (stake, distribute) or push them out (unstake, claim).
A falsy result or an exception means the transfer did not happen.

revert() gives the pool the all-or-nothing boundary of a transaction:
if any step of an operation fails, the pool reverts the transfers it made
during that operation, newest first. Transfers made by anyone else in the
meantime are left alone.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Set

logger = logging.getLogger(__name__)

TransferHook = Callable[[str, str, str, int], None]


class AssetTransfer(ABC):
    @abstractmethod
    def transfer_from(self, asset: str, owner: str, recipient: str, amount: int) -> bool:
        """Pulls `amount` of `asset` from `owner` to `recipient`."""

    @abstractmethod
    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> bool:
        """Pushes `amount` of `asset` from `sender` to `recipient`."""

    @abstractmethod
    def revert(self, asset: str, sender: str, recipient: str, amount: int) -> bool:
        """Undoes a completed move of `amount` from `sender` to `recipient`. Runs no token code."""


class InMemoryAssetBank(AssetTransfer):
    """
    Multi-asset balance book.

    Hooks registered with on_transfer() run after each successful move,
    standing in for token code that executes during a transfer. A hook that
    raises reverts the move and the exception propagates to the caller.
    """

    def __init__(self):
        # asset -> account -> balance
        self.balances: Dict[str, Dict[str, int]] = {}
        self.blocked_assets: Set[str] = set()
        self._hooks: List[TransferHook] = []

    def mint(self, asset: str, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Cannot mint a negative amount")
        book = self.balances.setdefault(asset, {})
        book[account] = book.get(account, 0) + amount

    def balance_of(self, asset: str, account: str) -> int:
        return self.balances.get(asset, {}).get(account, 0)

    def total_supply(self, asset: str) -> int:
        return sum(self.balances.get(asset, {}).values())

    def on_transfer(self, hook: TransferHook) -> None:
        self._hooks.append(hook)

    def clear_hooks(self) -> None:
        self._hooks.clear()

    def transfer_from(self, asset: str, owner: str, recipient: str, amount: int) -> bool:
        return self._move(asset, owner, recipient, amount)

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> bool:
        return self._move(asset, sender, recipient, amount)

    def revert(self, asset: str, sender: str, recipient: str, amount: int) -> bool:
        book = self.balances.setdefault(asset, {})
        if book.get(recipient, 0) < amount:
            logger.error(f"Cannot revert {amount} {asset} from {recipient}: balance {book.get(recipient, 0)}")
            return False
        book[recipient] -= amount
        book[sender] = book.get(sender, 0) + amount
        return True

    def _move(self, asset: str, sender: str, recipient: str, amount: int) -> bool:
        if asset in self.blocked_assets:
            logger.warning(f"Transfer of {asset} refused (asset blocked)")
            return False
        if amount < 0:
            return False

        book = self.balances.setdefault(asset, {})
        have = book.get(sender, 0)
        if have < amount:
            logger.warning(f"Transfer of {amount} {asset} from {sender} refused: balance {have}")
            return False

        book[sender] = have - amount
        book[recipient] = book.get(recipient, 0) + amount

        try:
            for hook in list(self._hooks):
                hook(asset, sender, recipient, amount)
        except Exception:
            book[recipient] -= amount
            book[sender] += amount
            raise
        return True
