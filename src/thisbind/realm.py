from __future__ import annotations

from typing import Optional

from .console import Console
from .runtime import Builtins, ContextResolver, ResolverMode, init_stdlib
from .scheduler import Scheduler
from .types import Frame, GlobalContext
from .utils import strict_from_env, time_scale_from_env

class Realm:
    """Process-wide state: the global context and everything bound to it.

    Created once at start; `close()` runs any pending callbacks and tears the
    global context down. Constructor arguments override THISBIND_STRICT and
    THISBIND_TIME_SCALE.
    """

    def __init__(
        self,
        mode: Optional[ResolverMode] = None,
        echo: bool = False,
        time_scale: Optional[float] = None,
    ):
        init_stdlib()

        if mode is None:
            mode = ResolverMode.STRICT if strict_from_env() else ResolverMode.SLOPPY

        if time_scale is None:
            time_scale = time_scale_from_env()

        self.global_ctx = GlobalContext()
        self.resolver = ContextResolver(self.global_ctx, mode)
        self.console = Console(echo=echo)
        self.scheduler = Scheduler(self.resolver, time_scale=time_scale)
        self.frame = Frame(realm=self, this=self.global_ctx, strict=mode is ResolverMode.STRICT)
        self.closed = False

        for name, factory in Builtins.globals.items():
            self.global_ctx.slots[name] = factory(self)

    @property
    def mode(self) -> ResolverMode:
        return self.resolver.mode

    def set_mode(self, mode: ResolverMode) -> None:
        self.resolver.mode = mode
        self.frame.strict = mode is ResolverMode.STRICT

    def close(self) -> None:
        if self.closed:
            return

        try:
            self.scheduler.drain()
        finally:
            self.global_ctx.slots.clear()
            self.closed = True

    def __enter__(self) -> 'Realm':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
