"""Centralized application configuration."""

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

DEFAULT_DATA_DIR = Path.home() / ".local" / "stopwatchd"
DEFAULT_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class Config(BaseModel):
    """Application-wide configuration."""

    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(description="Base directory for all application data")
    log_level: str = Field(default="INFO", description="Minimum level written to the log file")
    datetime_format: str = Field(default=DEFAULT_DATETIME_FORMAT, description="strftime format for wall-clock times")
    request_timeout: float = Field(default=10.0, gt=0, description="Client socket timeout in seconds")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return level

    @computed_field(description="Optional TOML configuration file")
    @property
    def config_path(self) -> Path:
        """Optional TOML configuration file."""
        return self.data_dir / "config.toml"

    @computed_field(description="Unix domain socket for daemon")
    @property
    def daemon_sock_path(self) -> Path:
        """Unix domain socket for daemon."""
        return self.data_dir / "daemon.sock"

    @computed_field(description="Daemon PID file")
    @property
    def daemon_pid_path(self) -> Path:
        """Daemon PID file."""
        return self.data_dir / "daemon.pid"

    @computed_field(description="Log file")
    @property
    def log_path(self) -> Path:
        """Log file."""
        return self.data_dir / "stopwatchd.log"

    @property
    def daemon_marker(self) -> str:
        """Absolute data directory: appears on the command line of this directory's daemon."""
        return str(self.data_dir.resolve())

    def daemon_command(self) -> list[str]:
        """Command line that runs the daemon for this data directory."""
        return ["sw", "--data-dir", self.daemon_marker, "daemon"]

    @staticmethod
    def build(data_dir: Path | None = None) -> "Config":
        """Build a Config from defaults and optional config.toml."""
        resolved_dir = data_dir if data_dir is not None else DEFAULT_DATA_DIR
        config_path = resolved_dir / "config.toml"

        kwargs: dict[str, Any] = {"data_dir": resolved_dir}
        if config_path.is_file():
            with config_path.open("rb") as f:
                toml_data = tomllib.load(f)
            if isinstance(toml_data.get("log_level"), str):
                kwargs["log_level"] = toml_data["log_level"]
            if isinstance(toml_data.get("datetime_format"), str):
                kwargs["datetime_format"] = toml_data["datetime_format"]
            if isinstance(toml_data.get("request_timeout"), int | float):
                kwargs["request_timeout"] = toml_data["request_timeout"]

        return Config(**kwargs)
