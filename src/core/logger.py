"""Logging configuration and service."""
import json
import logging
import logging.config
from typing import Any, Dict, Mapping, Optional

from .settings import Settings

REDACTED = "***"

# Lower-cased keys whose values must never reach log output
SENSITIVE_KEYS = frozenset(
    {
        "api_key",
        "apikey",
        "authorization",
        "x-api-key",
        "x-goog-api-key",
        "credentials",
        "password",
    }
)


def redact(value: Any) -> Any:
    """Return a copy of ``value`` with credential-bearing entries masked.

    Mappings are walked recursively so header dictionaries and nested
    config dumps are covered as well.
    """
    if isinstance(value, Mapping):
        return {
            key: REDACTED
            if str(key).lower() in SENSITIVE_KEYS and item
            else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value


class BaseFormatter(logging.Formatter):
    """Base formatter with common functionality."""

    def __init__(self, settings_instance: Settings) -> None:
        """Initialize formatter.

        Args:
            settings_instance: Settings instance for configuration
        """
        super().__init__()
        self.settings = settings_instance

    # LogRecord attributes that are not user supplied extras
    STANDARD_LOG_RECORD_ATTRIBUTES = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }

    def get_extra_fields(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Get redacted extra fields from record.

        Args:
            record: Log record to process

        Returns:
            Dictionary with extra fields
        """
        extra = {}

        for key, value in record.__dict__.items():
            if key not in self.STANDARD_LOG_RECORD_ATTRIBUTES:
                extra[key] = value

        for field in self.settings.LOG_EXTRA_FIELDS:
            if hasattr(record, field):
                extra[field] = getattr(record, field)

        return redact(extra)


class JsonFormatter(BaseFormatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string
        """
        log_data: dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        extra = self.get_extra_fields(record)
        if extra:
            sanitized_extra = {}
            for key, value in extra.items():
                try:
                    json.dumps({key: value})
                    sanitized_extra[key] = value
                except (TypeError, OverflowError, ValueError):
                    sanitized_extra[key] = f"<non-serializable: {type(value).__name__}>"
            log_data.update(sanitized_extra)

        if record.exc_info:
            exception_text = self.formatException(record.exc_info)
            if exception_text:
                log_data["exception"] = str(exception_text)

        try:
            return json.dumps(log_data)
        except (TypeError, OverflowError, ValueError) as e:
            return json.dumps(
                {
                    "time": self.formatTime(record),
                    "level": record.levelname,
                    "name": record.name,
                    "message": record.getMessage(),
                    "error": f"Failed to serialize log: {str(e)}",
                }
            )


class TextFormatter(BaseFormatter):
    """Text formatter for human-readable logging."""

    def format(self, record: logging.LogRecord) -> str:
        msg = (
            f"{self.formatTime(record)} - {record.levelname} - "
            f"{record.name} - {record.getMessage()}"
        )

        extra = self.get_extra_fields(record)
        if extra:
            msg += f" - extra={extra}"

        if record.exc_info:
            msg += f"\n{self.formatException(record.exc_info)}"

        return msg


class StructuredFormatter(BaseFormatter):
    """Structured formatter for key-value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f"time={self.formatTime(record)}",
            f"level={record.levelname}",
            f"name={record.name}",
            f"message={record.getMessage()}",
        ]

        extra = self.get_extra_fields(record)
        for key, value in extra.items():
            parts.append(f"{key}={value}")

        if record.exc_info:
            parts.append(f"exception={self.formatException(record.exc_info)}")

        return " ".join(parts)


class LoggerService:
    """Service for configuring and providing loggers."""

    def __init__(
        self,
        settings_instance: Settings,
        config: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize logging configuration.

        Args:
            settings_instance: Settings instance to use
            config: Optional logging configuration dictionary
        """
        self.settings = settings_instance
        self.formatters: Dict[str, BaseFormatter] = {
            "json": JsonFormatter(settings_instance),
            "text": TextFormatter(settings_instance),
            "structured": StructuredFormatter(settings_instance),
        }

        if config:
            logging.config.dictConfig(config)
        else:
            root_logger = logging.getLogger()
            root_logger.setLevel(getattr(logging, settings_instance.LOG_LEVEL.upper()))

    def get_logger(self, name: str, format: Optional[str] = None) -> logging.Logger:
        """Get logger instance.

        Args:
            name: Logger name, typically __name__
            format: Optional format override (json, text, structured)

        Returns:
            Logger instance
        """
        logger = logging.getLogger(name)

        # One handler per logger, configured on first use
        if len(logger.handlers) == 0:
            handler = logging.StreamHandler()
            formatter = (
                self.formatters[format]
                if format
                else self.formatters[self.settings.LOG_FORMAT]
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger
