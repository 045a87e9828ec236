# src/pipeforge/core/logging.py
"""Logging setup for pipeforge.

structlog and stdlib records share one processor chain and go to stderr,
so `pipeforge run --json` keeps stdout for the outcome.

Two processors are specific to pipe execution:

- node context: the engine binds node_id/operator_type around each
  operator call (node_context), so events logged inside an operator
  (fetch_completed, domain_rejected) say which node they came from.
- redact_secrets: fetch operators log URLs and may log headers. Header
  values such as Authorization carry decrypted secrets, and URLs can
  carry tokens in their query or userinfo. Both are masked before
  rendering.
"""

from __future__ import annotations

import logging
import sys
import urllib.parse
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

REDACTED = "[REDACTED]"

# Event keys (and nested header names) whose values are always masked.
SENSITIVE_KEYS = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
        "api_key",
        "password",
        "secret",
        "token",
    }
)

# Query parameters stripped from logged URLs.
SENSITIVE_PARAMS = frozenset(
    {
        "token",
        "access_token",
        "api_key",
        "apikey",
        "key",
        "secret",
        "client_secret",
        "password",
        "signature",
        "sig",
        "auth",
    }
)

# httpx logs every request at INFO and httpcore every connection event
_NOISY_LOGGERS = ("httpx", "httpcore")


def sanitize_url(url: str) -> str:
    """Mask userinfo and sensitive query parameters in a URL.

    Examples:
        >>> sanitize_url("https://user:pw@api.example.com/x?q=1&token=abc")
        'https://api.example.com/x?q=1&token=%5BREDACTED%5D'
        >>> sanitize_url("https://api.example.com/items")
        'https://api.example.com/items'
    """
    try:
        parts = urllib.parse.urlsplit(url)
        host = parts.hostname
        port = parts.port
    except ValueError:
        return url
    if host is None:
        return url

    netloc = parts.netloc
    if parts.username is not None or parts.password is not None:
        netloc = f"[{host}]" if ":" in host else host
        if port is not None:
            netloc = f"{netloc}:{port}"

    query = parts.query
    pairs = urllib.parse.parse_qsl(query, keep_blank_values=True)
    if any(key.lower() in SENSITIVE_PARAMS for key, _ in pairs):
        query = urllib.parse.urlencode([(k, REDACTED if k.lower() in SENSITIVE_PARAMS else v) for k, v in pairs])

    if netloc == parts.netloc and query == parts.query:
        return url
    return urllib.parse.urlunsplit(parts._replace(netloc=netloc, query=query))


def _redact(key: Any, value: Any) -> Any:
    if isinstance(key, str) and key.lower() in SENSITIVE_KEYS:
        return REDACTED
    if isinstance(value, Mapping):
        return {k: _redact(k, v) for k, v in value.items()}
    if isinstance(value, str) and isinstance(key, str) and (key == "url" or key.endswith("_url")):
        return sanitize_url(value)
    return value


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor masking credentials in event values."""
    return {key: value if key == "event" else _redact(key, value) for key, value in event_dict.items()}


@contextmanager
def node_context(node_id: str, operator_type: str) -> Iterator[None]:
    """Bind the executing node to every event logged in this context.

    Bindings live in contextvars; threads started from here only see them
    if the caller copies the context (contextvars.copy_context()).
    """
    with structlog.contextvars.bound_contextvars(node_id=node_id, operator_type=operator_type):
        yield


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        redact_secrets,
    ]


def _renderer(json_output: bool) -> list[Any]:
    if json_output:
        return [
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
    ]


def configure_logging(*, json_output: bool = False, level: str = "INFO") -> None:
    """Route structlog and stdlib logging to stderr at the given level.

    Args:
        json_output: Render one JSON object per line instead of console text.
        level: DEBUG, INFO, WARNING or ERROR.

    Raises:
        ValueError: If level is not a logging level name.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")

    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Tests and the CLI reconfigure within one process
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ProcessorFormatter(processors=_renderer(json_output), foreign_pre_chain=shared))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
