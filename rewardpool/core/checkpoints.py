# MIT License
# Copyright (c) 2025 Hashborn

"""
Checkpoint History

Append-only (index, value) sequences used to answer "what was this balance
when distribution k was created?".

A checkpoint written while the registry holds L distributions applies to
every distribution with index >= L. Changes made between two distributions
share the same index, so the last one overwrites the previous entry and the
sequence stays strictly increasing in index.
"""

from bisect import bisect_right
from typing import List
from ..protocol.types.ledger import Checkpoint


def write_checkpoint(checkpoints: List[Checkpoint], index: int, value: int) -> None:
    """
    Records `value` as effective from distribution `index` onwards.

    Raises:
        ValueError: if `index` is older than the last checkpoint (history is append-only)
    """
    if checkpoints:
        last = checkpoints[-1]
        if index < last.index:
            raise ValueError(f"Checkpoint index {index} precedes last checkpoint {last.index}")
        if index == last.index:
            last.value = value
            return
    checkpoints.append(Checkpoint(index=index, value=value))


def value_at(checkpoints: List[Checkpoint], index: int) -> int:
    """Value of the latest checkpoint whose index is <= `index`, or 0 if none."""
    pos = bisect_right(checkpoints, index, key=lambda c: c.index)
    if pos == 0:
        return 0
    return checkpoints[pos - 1].value
