"""
Shared infrastructure for the table editor

Provides:
- logging: structured/console logging setup and context loggers
- tracing: OpenTelemetry span helpers
- metrics: Prometheus metric registration and publishing
- retry: backoff for transient backend errors
- sql_safety: identifier quoting and parameter validation
"""

__version__ = "1.0.0"
__all__ = ["logging", "tracing", "metrics", "retry", "sql_safety"]
