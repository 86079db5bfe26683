"""
Editor configuration read from the environment.

Environment variables:
    TABLEDIT_PAGE_SIZE: Rows per page (default: 100)
    LOG_LEVEL: Log level (default: INFO)
    LOG_FILE: Log file path (default: none)
    LOG_JSON: Use JSON log format (default: false)
    OTLP_ENDPOINT: OTLP collector for traces (default: none)
    TRACE_CONSOLE: Export spans to stdout (default: false)
    METRICS_PORT: Port for the Prometheus endpoint (default: disabled)
"""

import logging
import os
from dataclasses import dataclass

from utils.sql_safety import validate_integer_param

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

_TRUTHY = ("true", "1", "yes")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in _TRUTHY


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


@dataclass
class EditorConfig:
    """Runtime settings for a table editor process."""

    page_size: int = DEFAULT_PAGE_SIZE
    log_level: str = "INFO"
    log_file: str | None = None
    log_json: bool = False
    otlp_endpoint: str | None = None
    trace_console: bool = False
    metrics_port: int | None = None

    def __post_init__(self):
        validate_integer_param(self.page_size, "page_size", min_value=1)
        if self.metrics_port is not None:
            validate_integer_param(self.metrics_port, "metrics_port", min_value=1)

    @classmethod
    def from_env(cls) -> "EditorConfig":
        return cls(
            page_size=_env_int("TABLEDIT_PAGE_SIZE", DEFAULT_PAGE_SIZE),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
            log_json=_env_flag("LOG_JSON"),
            otlp_endpoint=os.getenv("OTLP_ENDPOINT") or None,
            trace_console=_env_flag("TRACE_CONSOLE"),
            metrics_port=_env_int("METRICS_PORT", None),
        )
