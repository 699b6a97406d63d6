"""
readwell - readability enhancement for live HTML documents

Architecture:
1. Node handles (dom/) - the engine's only view of the host tree
2. Pure functions - style synthesis, subtree scoring
3. Watchers - mutation filter and viewport loader, fed by event channels
4. ReadingEnhancer - wires everything to one document through a context
"""

from .content import ScoredCandidate, locate, mark_content_region, score
from .enhancer import EnhancerContext, ReadingEnhancer
from .errors import CaptureError, PatternSyntaxError, ReadwellError, SettingsError
from .events import EventChannel, MutationChannel, MutationRecord
from .filtering import MutationFilter
from .lazyload import PLACEHOLDER_SRC, ViewportLoader, ViewportWatcher, VisibilityRegion, WatchState
from .patterns import PatternSet, compile_pattern, matches
from .settings import DEFAULT_SETTINGS, PRESETS, ReadingSettings
from .stats import ReadingStats
from .storage import JsonSettingsStore, MemorySettingsStore, SettingsStore
from .style import Debouncer, Rule, Ruleset, synthesize

__version__ = "1.0.0"

__all__ = [
    # Patterns
    'PatternSet',
    'compile_pattern',
    'matches',
    # Settings
    'ReadingSettings',
    'DEFAULT_SETTINGS',
    'PRESETS',
    'ReadingStats',
    'SettingsStore',
    'JsonSettingsStore',
    'MemorySettingsStore',
    # Style
    'Rule',
    'Ruleset',
    'synthesize',
    'Debouncer',
    # Content
    'ScoredCandidate',
    'score',
    'locate',
    'mark_content_region',
    # Watchers
    'MutationFilter',
    'ViewportLoader',
    'ViewportWatcher',
    'VisibilityRegion',
    'WatchState',
    'PLACEHOLDER_SRC',
    # Events
    'EventChannel',
    'MutationChannel',
    'MutationRecord',
    # Orchestration
    'EnhancerContext',
    'ReadingEnhancer',
    # Errors
    'ReadwellError',
    'PatternSyntaxError',
    'SettingsError',
    'CaptureError',
]
