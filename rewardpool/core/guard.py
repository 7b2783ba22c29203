# MIT License
# Copyright (c) 2025 Hashborn

"""
Reentrancy Guard

A non-reentrancy latch keyed by a scope tag. Asset collaborators run
untrusted code during transfers; if that code calls back into the pool
while an operation is outstanding, the nested call is rejected.

    with guard.guarded("pool"):
        ...  # critical section
"""

import logging
from contextlib import contextmanager
from typing import Set
from ..protocol.types.common import ReentrantCall

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    def __init__(self):
        self._entered: Set[str] = set()

    def is_entered(self, scope: str = "default") -> bool:
        return scope in self._entered

    def enter(self, scope: str = "default") -> None:
        if scope in self._entered:
            logger.warning(f"Rejected reentrant call into scope '{scope}'")
            raise ReentrantCall(f"Reentrant call rejected (scope '{scope}' already entered)")
        self._entered.add(scope)

    def exit(self, scope: str = "default") -> None:
        self._entered.discard(scope)

    @contextmanager
    def guarded(self, scope: str = "default"):
        self.enter(scope)
        try:
            yield
        finally:
            self.exit(scope)
