"""
Cooperative cancellation for hydration runs.

The engine never interrupts a thread; it checks the token at checkpoints
(before each catalog call, between dedup chunks, between persisted cards)
and stops there. Writes already committed stay, since every upsert is
idempotent.
"""
from __future__ import annotations

import threading

from cardvault.hydration.errors import HydrationCancelled


class CancellationToken:
    """Thread-safe cancellation flag shared between a caller and a running hydration.

    Examples:
        >>> token = CancellationToken()
        >>> token.raise_if_cancelled()  # no-op
        >>> token.cancel()
        >>> token.is_cancelled()
        True
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, checkpoint: str = "") -> None:
        """Raise HydrationCancelled if cancellation was requested."""
        if self._event.is_set():
            where = f" at {checkpoint}" if checkpoint else ""
            raise HydrationCancelled(f"Hydration cancelled{where}.")
