from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List

from .runtime import DEFAULT, ContextResolver
from .types import TbCallable, TbValue, ThisbindTypeError, is_callable

@dataclass
class Timer:
    """A callback waiting to run once its virtual due time is reached."""
    id: int
    callback: TbCallable
    due: float
    args: List[TbValue] = field(default_factory=list)

class Scheduler:
    """Deferred callbacks (`setTimeout`).

    Scheduling detaches a callback from whatever receiver scheduled it: each
    callback runs with the default invocation kind, so only a callback
    produced by bind keeps a fixed context.
    """

    def __init__(self, resolver: ContextResolver, time_scale: float = 1.0):
        self.resolver = resolver
        self.time_scale = time_scale
        self.clock = 0.0
        self._pending: Dict[int, Timer] = {}
        self._next_id = 1

    @property
    def pending(self) -> int:
        return len(self._pending)

    def set_timeout(self, callback: TbValue, delay_ms: float = 0.0, *args: TbValue) -> int:
        if not is_callable(callback):
            raise ThisbindTypeError("setTimeout expects a function callback")

        timer_id = self._next_id
        self._next_id += 1
        self._pending[timer_id] = Timer(
            id=timer_id,
            callback=callback,
            due=self.clock + max(0.0, delay_ms),
            args=list(args),
        )

        return timer_id

    def clear_timeout(self, timer_id: int) -> bool:
        return self._pending.pop(timer_id, None) is not None

    def drain(self) -> int:
        """Run every pending callback exactly once; returns how many ran."""
        if not self._pending:
            return 0

        return asyncio.run(self._drain())

    async def _drain(self) -> int:
        fired = 0

        while self._pending:
            timer = min(self._pending.values(), key=lambda t: (t.due, t.id))
            del self._pending[timer.id]

            wait_ms = timer.due - self.clock
            if wait_ms > 0 and self.time_scale > 0:
                await asyncio.sleep(wait_ms * self.time_scale / 1000.0)
            else:
                await asyncio.sleep(0)

            self.clock = max(self.clock, timer.due)
            self.resolver.invoke(timer.callback, timer.args, DEFAULT)
            fired += 1

        return fired
