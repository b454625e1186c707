"""Configuration management for the chroma-key compositor."""

import logging
from pathlib import Path
from typing import Optional, Dict, Any, Literal, Tuple

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from chromakey.core.enums import Interpolation


logger = logging.getLogger(__name__)


class KeyConfig(BaseModel):
    """Which pixels count as key."""
    mode: Literal["threshold", "color"] = "threshold"
    threshold: int = Field(default=150, ge=0, le=255)  # R, G, B must all exceed it
    color: Tuple[int, int, int] = (255, 255, 255)  # target for "color" mode
    tolerance: int = Field(default=60, ge=0, le=255)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: Tuple[int, int, int]) -> Tuple[int, int, int]:
        if any(not 0 <= c <= 255 for c in v):
            raise ValueError(f"color channels must be in [0, 255], got {v}")
        return v


class SchedulerConfig(BaseModel):
    """Cadence and failure policy of the compositing loop."""
    cycle_interval_ms: float = Field(default=50.0, gt=0)  # ~20 cycles/s
    workers: int = Field(default=1, ge=1)  # compositing threads per frame
    fail_fast: bool = False  # stop the session on the first cycle error


class BackgroundConfig(BaseModel):
    """Background image settings."""
    source: Optional[str] = None
    interpolation: Interpolation = Interpolation.BILINEAR


class InputConfig(BaseModel):
    """Input stream settings."""
    kind: Literal["webcam", "file", "screen"] = "webcam"
    device: int | str = 0  # webcam index or device path
    path: Optional[str] = None  # video file for kind="file"
    loop: bool = False
    width: Optional[int] = None
    height: Optional[int] = None
    fps: float = 30.0
    monitor: int = 1  # screen capture monitor

    @model_validator(mode="after")
    def check_path(self) -> "InputConfig":
        if self.kind == "file" and not self.path:
            raise ValueError("input.path is required when input.kind is 'file'")
        return self


class OutputConfig(BaseModel):
    """Output sink settings."""
    kind: Literal["window", "file", "none"] = "window"
    path: Optional[str] = None  # video file for kind="file"
    window_title: str = "ChromaKey"
    fps: Optional[float] = None  # defaults to the cycle rate
    fourcc: str = "mp4v"

    @model_validator(mode="after")
    def check_path(self) -> "OutputConfig":
        if self.kind == "file" and not self.path:
            raise ValueError("output.path is required when output.kind is 'file'")
        return self


class LoggingConfig(BaseModel):
    """Configuration for logging."""
    level: str = "INFO"
    log_to_file: bool = False
    log_directory: str = "logs"
    max_log_size_mb: int = 10
    backup_count: int = 3

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        if not isinstance(getattr(logging, v.upper(), None), int):
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()


class ChromaKeyConfig(BaseModel):
    """Root configuration for the compositor."""

    project_name: str = "ChromaKey"
    debug_mode: bool = False

    key: KeyConfig = Field(default_factory=KeyConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    background: BackgroundConfig = Field(default_factory=BackgroundConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def setup_logging(self) -> None:
        """Configure logging based on config."""
        level_name = "DEBUG" if self.debug_mode else self.logging.level
        log_level = getattr(logging, level_name)

        handlers = []

        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

        # File handler
        if self.logging.log_to_file:
            log_dir = Path(self.logging.log_directory)
            log_dir.mkdir(exist_ok=True, parents=True)

            from logging.handlers import RotatingFileHandler
            file_handler = RotatingFileHandler(
                log_dir / "chromakey.log",
                maxBytes=self.logging.max_log_size_mb * 1024 * 1024,
                backupCount=self.logging.backup_count
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

        logging.basicConfig(
            level=log_level,
            handlers=handlers,
            force=True
        )

        logger.info(f"Logging configured: level={level_name}")


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    setup_logging: bool = True,
) -> ChromaKeyConfig:
    """Load configuration from YAML file with optional overrides.

    Args:
        config_path: Path to YAML config file. If None, uses default.yaml
        overrides: Dictionary of config overrides (nested keys with dots)
        setup_logging: Install logging handlers from the loaded config

    Returns:
        Validated ChromaKeyConfig instance

    Example:
        >>> config = load_config("config/default.yaml")
        >>> config = load_config(overrides={"key.threshold": 180})
    """
    if config_path is None:
        repo_root = Path(__file__).parent.parent.parent.parent
        config_path = repo_root / "config" / "default.yaml"
    else:
        config_path = Path(config_path)

    config_dict = {}
    if config_path.exists():
        logger.info(f"Loading config from {config_path}")
        with open(config_path) as f:
            config_dict = yaml.safe_load(f) or {}
    else:
        logger.warning(f"Config file not found: {config_path}, using defaults")

    if overrides:
        config_dict = _apply_overrides(config_dict, overrides)

    config = ChromaKeyConfig(**config_dict)
    if setup_logging:
        config.setup_logging()

    return config


def _apply_overrides(
    config_dict: Dict[str, Any],
    overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """Apply nested overrides to config dictionary.

    Example:
        overrides = {"scheduler.cycle_interval_ms": 33}
        -> config_dict["scheduler"]["cycle_interval_ms"] = 33
    """
    for key, value in overrides.items():
        keys = key.split(".")
        d = config_dict
        for k in keys[:-1]:
            d = d.setdefault(k, {})
        d[keys[-1]] = value
    return config_dict
