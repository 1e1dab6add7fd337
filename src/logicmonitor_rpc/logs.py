"""
Logging
=======
Structured logging setup and credential redaction.
"""

import logging
import sys
from typing import Any, Optional

import httpx
import structlog

from logicmonitor_rpc.config import Settings, get_settings

REDACTED = "***"
SECRET_PARAM = "p"

# Loggers of the HTTP stack that write request URLs at INFO or DEBUG
HTTP_LOGGERS = ("httpx", "httpcore")


def redact_url(url: httpx.URL | str) -> str:
    """Return ``url`` with the password query parameter masked."""
    url = httpx.URL(str(url))
    if SECRET_PARAM not in url.params:
        return str(url)
    params = [
        (key, REDACTED if key == SECRET_PARAM else value)
        for key, value in url.params.multi_items()
    ]
    return str(url.copy_with(params=params))


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor masking the password in a logged ``url`` field."""
    if "url" in event_dict:
        event_dict["url"] = redact_url(event_dict["url"])
    return event_dict


class RedactSecretsFilter(logging.Filter):
    """Masks the password in URLs passed as stdlib log record arguments."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, tuple):
            record.args = tuple(
                redact_url(arg) if isinstance(arg, httpx.URL) else arg
                for arg in record.args
            )
        return True


def _install_http_filters(enabled: bool) -> None:
    for name in HTTP_LOGGERS:
        http_logger = logging.getLogger(name)
        for existing in [f for f in http_logger.filters if isinstance(f, RedactSecretsFilter)]:
            http_logger.removeFilter(existing)
        if enabled:
            http_logger.addFilter(RedactSecretsFilter())


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure structlog for applications embedding the client.

    Unless ``log_secrets`` is set, the password is masked both in structlog
    events and in the request lines httpx logs on its own.
    """
    settings = settings or get_settings()
    redact = not settings.log_secrets

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level),
    )
    _install_http_filters(redact)

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
    ]
    if redact:
        processors.append(redact_secrets)
    processors += [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
