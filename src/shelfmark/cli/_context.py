"""Runtime context for CLI commands.

Initialized once in the main callback and available to every command via
``ctx.obj``. Heavy collaborators (resolver, engine, cover cache) are built on
first use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shelfmark.analytics import AnalyticsEngine
    from shelfmark.config import Settings
    from shelfmark.covers import CoverCache
    from shelfmark.resolver import Resolver

logger = logging.getLogger(__name__)


@dataclass
class RuntimeContext:
    """Typed runtime context available to all commands via ctx.obj.

    Example:
        @app.command()
        def my_command(ctx: typer.Context) -> None:
            runtime = get_runtime_context(ctx.obj)
            results = runtime.resolver.resolve("dune")
    """

    settings: Settings
    config_path: Path | None = None
    verbose: bool = False

    _resolver: Resolver | None = field(default=None, repr=False)
    _engine: AnalyticsEngine | None = field(default=None, repr=False)
    _cover_cache: CoverCache | None = field(default=None, repr=False)

    @property
    def cover_cache(self) -> CoverCache:
        if self._cover_cache is None:
            from shelfmark.covers import CoverCache

            self._cover_cache = CoverCache(
                self.settings.covers.directory,
                memory_capacity=self.settings.covers.memory_capacity,
            )
        return self._cover_cache

    @property
    def resolver(self) -> Resolver:
        if self._resolver is None:
            from shelfmark.resolver import Resolver

            self._resolver = Resolver.from_settings(self.settings, cover_cache=self.cover_cache)
            logger.debug("Resolver ready (%s)", self.settings.app.env)
        return self._resolver

    @property
    def engine(self) -> AnalyticsEngine:
        if self._engine is None:
            from shelfmark.analytics import AnalyticsEngine

            self._engine = AnalyticsEngine(self.settings.analytics)
        return self._engine


def get_runtime_context(ctx_obj: object) -> RuntimeContext:
    """Extract RuntimeContext from typer context object.

    Commands invoked without the main callback (tests calling a sub-app
    directly) get a context built from environment settings.
    """
    if isinstance(ctx_obj, RuntimeContext):
        return ctx_obj
    if ctx_obj is None:
        from shelfmark.config import get_settings

        return RuntimeContext(settings=get_settings())
    raise TypeError(f"Expected RuntimeContext, got {type(ctx_obj).__name__}")
