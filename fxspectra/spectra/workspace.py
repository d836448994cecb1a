"""Reusable scratch buffers for the iterative spectral routines.

A :class:`WorkspacePool` hands out float64 scratch arrays keyed by the
operation that needs them and their size. A borrowed buffer is zeroed
before use and goes back to the pool when the ``with`` block ends, so a
caller that runs many deconvolutions of the same size allocates once.

A pool is an explicit object: routines accept ``pool=None`` and then
simply allocate. Each key can be borrowed by one caller at a time; a
second borrow of a busy key raises ``RuntimeError``. Threads that want to
run in parallel should each own a pool.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

import numpy as np

from ..logging import get_logger

logger = get_logger(__name__)


class Operation(Enum):
    """Operations that draw scratch space from a pool."""

    BACKGROUND = "background"
    GOLD = "gold"
    RICHARDSON_LUCY = "richardson_lucy"
    MARKOV = "markov"
    SEARCH = "search"


_Key = Tuple[Operation, int]


class WorkspacePool:
    """Pool of zero-initialized scratch arrays keyed by (operation, size)."""

    def __init__(self) -> None:
        self._free: Dict[_Key, np.ndarray] = {}
        self._busy: set[_Key] = set()

    def __len__(self) -> int:
        return len(self._free) + len(self._busy)

    def is_borrowed(self, operation: Operation, size: int) -> bool:
        return (Operation(operation), int(size)) in self._busy

    @contextmanager
    def borrow(self, operation: Operation, size: int) -> Iterator[np.ndarray]:
        """
        Borrow a zeroed scratch array of ``size`` entries.

        Parameters
        ----------
        operation:
            The operation the buffer is used for.
        size:
            Number of float64 entries.

        Raises
        ------
        ValueError
            If size is negative.
        RuntimeError
            If the same (operation, size) is already borrowed.
        """
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        key = (Operation(operation), int(size))
        if key in self._busy:
            raise RuntimeError(
                f"Workspace {key[0].value}[{key[1]}] is already in use"
            )

        buf = self._free.pop(key, None)
        if buf is None:
            logger.debug("Allocating workspace %s[%d]", key[0].value, key[1])
            buf = np.zeros(key[1], dtype=float)
        else:
            buf.fill(0.0)

        self._busy.add(key)
        try:
            yield buf
        finally:
            self._busy.discard(key)
            self._free[key] = buf

    def clear(self) -> None:
        """Drop every idle buffer."""
        self._free.clear()


@contextmanager
def scratch(pool: Optional[WorkspacePool], operation: Operation, size: int) -> Iterator[np.ndarray]:
    """Borrow from ``pool``, or allocate a fresh zeroed array when it is None."""
    if pool is None:
        yield np.zeros(size, dtype=float)
        return
    with pool.borrow(operation, size) as buf:
        yield buf
