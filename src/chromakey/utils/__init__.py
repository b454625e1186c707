"""Configuration and logging utilities."""

from .config import (
    BackgroundConfig,
    ChromaKeyConfig,
    InputConfig,
    KeyConfig,
    LoggingConfig,
    OutputConfig,
    SchedulerConfig,
    load_config,
)

__all__ = [
    "BackgroundConfig",
    "ChromaKeyConfig",
    "InputConfig",
    "KeyConfig",
    "LoggingConfig",
    "OutputConfig",
    "SchedulerConfig",
    "load_config",
]
