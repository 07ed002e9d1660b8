"""Configuration for threadchat.

Centralizes defaults, environment lookup and logging setup so the CLI and
the session loop never read the environment themselves.
"""

import logging
import math
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_POLL_INTERVAL = 5.0  # Seconds between thread polls
DEFAULT_REQUEST_TIMEOUT = 10.0  # Seconds, http backend only
DEFAULT_SESSION_DIR = "~/.threadchat"
LOG_FILE_NAME = "threadchat.log"


class LogLevel:
    """Log level names accepted by --log-level, mapped to logging levels.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


def parse_positive_seconds(value: Any, default: float) -> float:
    """Parse a duration in seconds.

    Anything that is not a finite positive number (None, "", "abc", 0, -3,
    "nan") silently falls back to ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(seconds) or seconds <= 0:
        return default
    return seconds


def parse_poll_interval(value: Any, default: float = DEFAULT_POLL_INTERVAL) -> float:
    """Parse a poll interval in seconds, falling back to 5 (or ``default``)."""
    return parse_positive_seconds(value, default)


class PollConfig(BaseModel):
    """Poll timer configuration, fixed for one session loop invocation."""

    model_config = ConfigDict(frozen=True)

    interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)


class ChatSettings(BaseModel):
    """Client settings resolved from environment and CLI options."""

    backend: str = Field(default="memory", description="Gateway backend: memory or http")
    base_url: str | None = Field(default=None, description="Server root for the http backend")
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    session_dir: Path = Field(default=Path(DEFAULT_SESSION_DIR).expanduser())
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)

    @classmethod
    def from_env(cls, **overrides: Any) -> "ChatSettings":
        """Build settings from THREADCHAT_* variables; non-None overrides win.

        Environment variables:
            THREADCHAT_BACKEND: memory or http (default: memory)
            THREADCHAT_BASE_URL: Server root for the http backend
            THREADCHAT_POLL_INTERVAL: Seconds between polls (default: 5)
            THREADCHAT_SESSION_DIR: Session/log directory (default: ~/.threadchat)
            THREADCHAT_REQUEST_TIMEOUT: http request timeout (default: 10)
        """
        env_interval = parse_poll_interval(os.getenv("THREADCHAT_POLL_INTERVAL"))
        values: dict[str, Any] = {
            "backend": os.getenv("THREADCHAT_BACKEND", "memory").lower(),
            "base_url": os.getenv("THREADCHAT_BASE_URL") or None,
            "session_dir": Path(os.getenv("THREADCHAT_SESSION_DIR", DEFAULT_SESSION_DIR)).expanduser(),
            "request_timeout": parse_positive_seconds(
                os.getenv("THREADCHAT_REQUEST_TIMEOUT"), default=DEFAULT_REQUEST_TIMEOUT
            ),
        }
        interval = overrides.pop("poll_interval", None)
        values.update({k: v for k, v in overrides.items() if v is not None})
        values["poll_interval"] = parse_poll_interval(interval, default=env_interval)
        return cls(**values)

    @property
    def poll(self) -> PollConfig:
        return PollConfig(interval_seconds=self.poll_interval)


def configure_logging(level: str | None, log_file: Path | None = None) -> Path | None:
    """Route threadchat logs to a file through rich's handler.

    The chat frame owns the terminal, so records never go to stdout.
    With ``level`` None logging stays silent.

    Returns:
        The log file path when logging was enabled
    """
    from rich.console import Console
    from rich.logging import RichHandler

    root = logging.getLogger("threadchat")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
        if isinstance(handler, RichHandler):
            handler.console.file.close()

    if level is None:
        root.addHandler(logging.NullHandler())
        root.propagate = False
        return None

    path = Path(log_file).expanduser() if log_file else Path(DEFAULT_SESSION_DIR).expanduser() / LOG_FILE_NAME
    path.parent.mkdir(parents=True, exist_ok=True)
    stream = open(path, "a", encoding="utf-8")  # noqa: SIM115 - owned by the handler
    console = Console(file=stream, force_terminal=False, width=120)
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True, markup=False)
    root.addHandler(handler)
    root.setLevel(LogLevel.from_string(level))
    root.propagate = False
    return path
