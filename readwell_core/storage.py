"""
Settings Store - persistence collaborator for reading settings

get() always returns a complete, consistent snapshot: the stored record
when it parses strictly, otherwise the documented defaults. set() reports
success instead of raising.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from .errors import SettingsError
from .settings import DEFAULT_SETTINGS, ReadingSettings

logger = logging.getLogger(__name__)


class SettingsStore(ABC):
    """get/set of the opaque settings record"""

    @abstractmethod
    def get(self) -> ReadingSettings:
        ...

    @abstractmethod
    def set(self, settings: ReadingSettings) -> bool:
        ...


class MemorySettingsStore(SettingsStore):
    """In-process store; `fail_writes` simulates a store that rejects writes"""

    def __init__(self, initial: Optional[ReadingSettings] = None, fail_writes: bool = False):
        self._settings = initial or DEFAULT_SETTINGS
        self.fail_writes = fail_writes

    def get(self) -> ReadingSettings:
        return self._settings

    def set(self, settings: ReadingSettings) -> bool:
        if self.fail_writes:
            logger.error("Saving settings failed: store is read-only")
            return False
        self._settings = settings
        return True


class JsonSettingsStore(SettingsStore):
    """Settings persisted as a JSON object in a single file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._last_good: Optional[ReadingSettings] = None

    def get(self) -> ReadingSettings:
        if not self.path.exists():
            return self._last_good or DEFAULT_SETTINGS
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            settings = ReadingSettings.from_mapping(data, strict=True)
        except (OSError, ValueError, SettingsError) as e:
            logger.warning(f"Reading settings from {self.path} failed, using defaults: {e}")
            return DEFAULT_SETTINGS
        self._last_good = settings
        return settings

    def set(self, settings: ReadingSettings) -> bool:
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".settings-", suffix=".json", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            logger.error(f"Saving settings to {self.path} failed: {e}")
            return False
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
        self._last_good = settings
        return True
