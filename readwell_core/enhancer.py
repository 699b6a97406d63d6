"""
Reading Enhancer - wires the components to one live document

All collaborators (settings store, style sink, event channels, viewport
watcher) come in through an explicit EnhancerContext; nothing is global.

Usage:
    ctx = EnhancerContext(store=JsonSettingsStore(path), sink=SoupStyleSink(root))
    enhancer = ReadingEnhancer(ctx)
    enhancer.start(root)
    ...
    ctx.mutations.notify(MutationRecord(added=[node]))
    enhancer.teardown()
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from .config import Config, config as default_config
from .content import mark_content_region
from .dom.node import Node
from .events import MutationChannel, MutationRecord, Subscription
from .filtering import MutationFilter
from .lazyload import (
    ViewportLoader,
    ViewportWatcher,
    VisibilityRegion,
    attribute_geometry,
    disable_autoplay,
    optimize_images,
)
from .settings import DEFAULT_SETTINGS, ReadingSettings
from .stats import ReadingStats
from .storage import MemorySettingsStore, SettingsStore
from .style import Debouncer, MemoryStyleSink, StyleSink, apply_mode_classes, find_body, render_stylesheet

logger = logging.getLogger(__name__)

AUTO_NIGHT_INTERVAL = 60.0


@dataclass
class EnhancerContext:
    store: SettingsStore = field(default_factory=MemorySettingsStore)
    sink: StyleSink = field(default_factory=MemoryStyleSink)
    mutations: MutationChannel = field(default_factory=MutationChannel)
    watcher: Optional[ViewportWatcher] = None
    config: Config = field(default_factory=lambda: default_config)

    def __post_init__(self):
        if self.watcher is None:
            self.watcher = ViewportWatcher(
                VisibilityRegion(0, self.config.viewport_height),
                geometry=attribute_geometry,
            )


class ReadingEnhancer:
    def __init__(self, context: Optional[EnhancerContext] = None, mutation_filter: Optional[MutationFilter] = None):
        self.context = context or EnhancerContext()
        self.filter = mutation_filter or MutationFilter()
        self.loader = ViewportLoader(self.context.watcher)
        self.root: Optional[Node] = None
        self.body: Optional[Node] = None
        self.content_region: Optional[Node] = None
        self.settings: ReadingSettings = DEFAULT_SETTINGS
        self.stats = ReadingStats()
        self._debouncer = Debouncer(self._apply_settings, self.context.config.debounce_seconds)
        self._subscription: Optional[Subscription] = None
        self._filtering = False
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self, root: Node, hour: Optional[int] = None) -> Dict[str, Any]:
        """
        One-time startup pass over the document; returns a summary.

        `hour` is the local hour used for auto night mode (default: now).
        """
        self.root = root
        self.body = find_body(root)
        settings = self._resolve_auto_night(self.context.store.get(), hour)
        summary: Dict[str, Any] = {"hidden": 0, "deferred": 0, "content_region": None}

        self._apply_settings(settings)

        self._filtering = settings.enable_ad_block
        if self._filtering:
            try:
                summary["hidden"] = self.filter.scan_initial(root)
            except Exception as e:
                self._filtering = False
                logger.error(f"Ad filter startup failed: {e}", exc_info=True)

        if settings.enable_lazy_load:
            try:
                optimize_images(root)
                disable_autoplay(root)
                summary["deferred"] = self.loader.init(root)
            except Exception as e:
                logger.error(f"Lazy loading startup failed: {e}", exc_info=True)

        if self._subscription is None:
            self._subscription = self.context.mutations.subscribe(self._on_mutation)

        try:
            self.content_region = mark_content_region(root)
            summary["content_region"] = repr(self.content_region)
        except Exception as e:
            logger.error(f"Content region detection failed: {e}", exc_info=True)

        self.stats.resume()
        self._started = True
        logger.info(f"Reading enhancer started: {summary}")
        return summary

    def _on_mutation(self, records: Sequence[MutationRecord]) -> None:
        if self._filtering:
            self.filter.on_mutation(records)
        self.loader.on_mutation(records)

    def _apply_settings(self, settings: ReadingSettings) -> None:
        self.settings = settings
        self.context.sink.apply(render_stylesheet(settings))
        if self.body is not None:
            apply_mode_classes(self.body, settings)

    def settings_changed(self, settings: ReadingSettings) -> bool:
        """
        Persist an edit and schedule re-application.

        Bursts of edits are collapsed into a single apply after the
        debounce window. Returns the store's write result.
        """
        saved = self.context.store.set(settings)
        if not saved:
            logger.warning("Settings change not persisted, applying for this page only")
        self._debouncer.trigger(settings)
        return saved

    def flush(self) -> None:
        """Apply any pending settings change now."""
        self._debouncer.flush()

    def apply_preset(self, name: str) -> ReadingSettings:
        settings = self.context.store.get().with_preset(name)
        self.settings_changed(settings)
        return settings

    def reset_settings(self) -> ReadingSettings:
        self.settings_changed(DEFAULT_SETTINGS)
        return DEFAULT_SETTINGS

    def _resolve_auto_night(self, settings: ReadingSettings, hour: Optional[int]) -> ReadingSettings:
        if hour is None:
            hour = datetime.now().hour
        resolved = settings.resolve_auto_night(hour)
        if resolved != settings and not self.context.store.set(resolved):
            logger.warning("Auto night mode change not persisted")
        return resolved

    def check_auto_night(self, hour: Optional[int] = None) -> bool:
        """Switch dark mode for the time of day; True if settings changed."""
        if hour is None:
            hour = datetime.now().hour
        current = self.context.store.get()
        resolved = current.resolve_auto_night(hour)
        if resolved == current:
            return False
        logger.info(f"Auto night mode: dark mode {'on' if resolved.dark_mode else 'off'}")
        self.settings_changed(resolved)
        return True

    async def watch_auto_night(self, interval: float = AUTO_NIGHT_INTERVAL) -> None:
        """Re-check auto night mode every `interval` seconds until teardown."""
        while self._started:
            await asyncio.sleep(interval)
            if self._started:
                self.check_auto_night()

    def teardown(self) -> None:
        self._debouncer.cancel()
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        self.loader.teardown()
        self.context.watcher.disconnect()
        self.stats.pause()
        self._started = False
        logger.info("Reading enhancer torn down")
