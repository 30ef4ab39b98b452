"""
LoggingService - structured logging setup shared by the client, proxy and CLI.

Every event goes through structlog to stderr (stdout is reserved for document
content in the CLI). Credentials are scrubbed by a processor before rendering,
so a module may log whatever it has at hand without leaking the Upstash token.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

import logging
import re
import sys
import traceback
from dataclasses import dataclass, field
from typing import Any, MutableMapping, Optional

import structlog
from structlog.types import Processor

REDACTED = "[REDACTED]"

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_FORMATS = ("json", "console")

DEFAULT_SENSITIVE_KEYS = frozenset(
    {
        "authorization",
        "token",
        "api_key",
        "apikey",
        "upstash_api_key",
        "access_token",
        "bearer",
        "secret",
        "password",
    }
)

_BEARER_RE = re.compile(r"(?i)\bbearer\s+[^\s\"',]+")


@dataclass
class LoggingConfig:
    """
    Settings for LoggingService.configure_logging().

    Attributes:
        level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL
        format: "json" for machines, "console" for a terminal
        output_stream: Where rendered lines go (default: sys.stderr)
        sensitive_keys: Event keys whose values are replaced with "[REDACTED]"
    """

    level: str = "INFO"
    format: str = "json"
    output_stream: Any = sys.stderr
    sensitive_keys: frozenset = field(default_factory=lambda: DEFAULT_SENSITIVE_KEYS)

    def __post_init__(self) -> None:
        self.level = self.level.upper()
        if self.level not in VALID_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.level}. Must be one of: {', '.join(VALID_LEVELS)}"
            )

        self.format = self.format.lower()
        if self.format not in VALID_FORMATS:
            raise ValueError(f"Invalid format: {self.format}. Must be 'json' or 'console'")

        self.sensitive_keys = frozenset(k.lower() for k in self.sensitive_keys)


class LoggingService:
    """
    Process-wide structlog configuration.

    Modules keep using ``structlog.get_logger(__name__)``; this class only
    decides how their events are processed and rendered.

    Example:
        LoggingService.configure_logging(level="INFO", format="json")
        structlog.get_logger("upsync.proxy").info(
            "proxy_forwarded", authorization="Bearer abc"  # rendered as [REDACTED]
        )
    """

    _configured: bool = False
    _config: Optional[LoggingConfig] = None

    @classmethod
    def configure_logging(
        cls, level: str = "INFO", format: str = "json", config: Optional[LoggingConfig] = None
    ) -> None:
        """
        Configure structlog once for the process.

        Raises:
            ValueError: If level or format is invalid
            RuntimeError: If logging is already configured
        """
        if cls._configured:
            raise RuntimeError("Logging already configured")

        cfg = config if config is not None else LoggingConfig(level=level, format=format)
        cls._config = cfg

        structlog.configure(
            processors=cls._setup_processors(cfg),
            wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, cfg.level)),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=cfg.output_stream),
            cache_logger_on_first_use=True,
        )

        cls._configured = True

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def log_error(
        cls,
        error: Exception,
        correlation_id: str,
        context: Optional[dict[str, Any]] = None,
        logger_name: str = "upsync",
        include_stack_trace: bool = True,
    ) -> None:
        """
        Log one "error_occurred" event for a failure the caller has handled.

        Args:
            error: The exception
            correlation_id: Id that ties this event to the error the user saw
            context: Extra fields (command, key, status...)
            logger_name: Logger to emit on
            include_stack_trace: Attach the current traceback

        Raises:
            ValueError: If correlation_id is empty
        """
        if not correlation_id:
            raise ValueError("correlation_id cannot be empty")

        event: dict[str, Any] = dict(context or {})
        event.update(
            error_type=type(error).__name__,
            error_message=str(error),
            correlation_id=correlation_id,
        )

        error_code = getattr(error, "error_code", None)
        if error_code:
            event["error_code"] = error_code

        if include_stack_trace:
            event["stack_trace"] = traceback.format_exc()

        structlog.get_logger(logger_name).error("error_occurred", **event)

    @classmethod
    def redact(cls, value: Any) -> Any:
        """
        Return value with credentials scrubbed.

        Dict entries under a sensitive key become "[REDACTED]", dicts and
        lists are walked recursively, and "Bearer <token>" inside any string
        is masked.
        """
        keys = cls._config.sensitive_keys if cls._config else DEFAULT_SENSITIVE_KEYS

        if isinstance(value, dict):
            return {
                k: REDACTED if str(k).lower() in keys else cls.redact(v) for k, v in value.items()
            }
        if isinstance(value, list):
            return [cls.redact(item) for item in value]
        if isinstance(value, tuple):
            return tuple(cls.redact(item) for item in value)
        if isinstance(value, str):
            return _BEARER_RE.sub(f"Bearer {REDACTED}", value)
        return value

    @classmethod
    def _redact_processor(
        cls, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        return cls.redact(dict(event_dict))

    @classmethod
    def _setup_processors(cls, cfg: LoggingConfig) -> list[Processor]:
        """Level and timestamp, exception formatting, redaction, then the renderer."""
        processors: list[Processor] = [
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            cls._redact_processor,
        ]

        if cfg.format == "console":
            processors.append(structlog.dev.ConsoleRenderer(colors=True))
        else:
            processors.append(structlog.processors.JSONRenderer())

        return processors
