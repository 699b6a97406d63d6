#!/usr/bin/env python3
from dataclasses import dataclass
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Config:
    """Engine configuration (not the user's reading preferences)"""
    # Quiet window before a settings change is re-synthesized and applied
    debounce_ms: int = int(os.getenv("READWELL_DEBOUNCE_MS", "300"))
    viewport_height: int = int(os.getenv("READWELL_VIEWPORT_HEIGHT", "800"))
    settings_path: Path = Path(os.getenv("READWELL_SETTINGS_PATH", os.path.expanduser("~/.config/readwell/settings.json")))
    headless: bool = os.getenv("READWELL_HEADLESS", "true").lower() in ["true", "1", "yes"]
    nav_timeout_ms: int = int(os.getenv("READWELL_NAV_TIMEOUT_MS", "30000"))
    enable_debug: bool = os.getenv("READWELL_DEBUG", "false").lower() in ["true", "1", "yes"]

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

config = Config()
