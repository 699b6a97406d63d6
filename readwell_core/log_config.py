"""
Log Configuration - Settings for logging behavior
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class LogConfig:
    """Configuration for logging"""

    log_dir: Optional[str] = None
    log_to_console: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> 'LogConfig':
        """Create config from environment variables"""
        return cls(
            log_dir=os.getenv("READWELL_LOG_DIR") or None,
            log_to_console=os.getenv("READWELL_LOG_CONSOLE", "true").lower() == "true",
            log_level=os.getenv("READWELL_LOG_LEVEL", "INFO"),
        )

    def get_log_path(self) -> Optional[str]:
        """Get the path for the log file, if file logging is enabled"""
        if not self.log_dir:
            return None
        os.makedirs(self.log_dir, exist_ok=True)
        return os.path.join(self.log_dir, "readwell.log")


def setup_logging(log_config: Optional[LogConfig] = None) -> logging.Logger:
    """
    Install handlers on the package logger.

    Safe to call more than once; handlers are only added the first time.
    """
    log_config = log_config or LogConfig.from_env()
    logger = logging.getLogger("readwell_core")
    logger.setLevel(getattr(logging, log_config.log_level.upper(), logging.INFO))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)
    if log_config.log_to_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    log_path = log_config.get_log_path()
    if log_path:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
