"""Per-instance latch against re-entrant processing of return signals."""

from __future__ import annotations


class ProcessGuard:
    """One-shot boolean latch.

    Scoped to a single flow instance; cross-process duplicates are handled by
    the checkout token, not here. ``acquire`` never awaits, so under asyncio
    the check and the set cannot interleave with another task.
    """

    __slots__ = ("_held",)

    def __init__(self) -> None:
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> bool:
        if self._held:
            return False
        self._held = True
        return True
