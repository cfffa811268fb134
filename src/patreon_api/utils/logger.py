"""
Logging infrastructure for the Patreon API client.

Provides structured logging with configurable formats and levels.

This module offers:
- JSON and text formatters
- Redaction of OAuth tokens, client secrets and webhook signatures
- A specialised logger for outbound API requests

Example:
    >>> from patreon_api.utils.logger import get_logger, setup_logging
    >>> setup_logging(level="DEBUG", format_type="json")
    >>> logger = get_logger(__name__)
    >>> logger.info("Webhook received", extra={"trigger": "members:create"})
"""

import logging
import sys
import json
import re
import hashlib
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Union, List, Pattern
from pathlib import Path
from enum import Enum


class LogLevel(Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(Enum):
    """Supported log formats."""
    JSON = "json"
    TEXT = "text"


class Colors:
    """ANSI color codes for console output."""
    CYAN = '\033[36m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    RED = '\033[31m'
    MAGENTA = '\033[35m'
    RESET = '\033[0m'

    LEVEL_COLORS = {
        LogLevel.DEBUG.value: CYAN,
        LogLevel.INFO.value: GREEN,
        LogLevel.WARNING.value: YELLOW,
        LogLevel.ERROR.value: RED,
        LogLevel.CRITICAL.value: MAGENTA,
    }


# Field names whose values never reach a log sink
SENSITIVE_FIELDS = {
    'authorization', 'token', 'password', 'secret', 'api_key',
    'access_token', 'refresh_token', 'bearer', 'credential',
    'client_secret', 'code', 'signature', 'webhook_secret',
    'x-patreon-signature', 'email', 'phone_number',
}

DEFAULT_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

# Standard log record fields to exclude when copying extra fields
STANDARD_LOG_FIELDS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName',
}


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return lowered in SENSITIVE_FIELDS or any(
        sensitive in lowered for sensitive in ('token', 'secret', 'signature', 'password')
    )


# ============================================================================
# Sensitive Data Redaction
# ============================================================================

class RedactionLevel(Enum):
    """Different levels of data redaction."""
    NONE = "none"
    BASIC = "basic"
    STANDARD = "standard"
    AGGRESSIVE = "aggressive"


class SensitiveDataRedactor:
    """
    Redacts credentials from log payloads.

    BASIC only looks at field names. STANDARD also scrubs bearer
    tokens, OAuth form parameters and query strings. AGGRESSIVE
    additionally replaces anything that looks like a hex digest
    with a short hash so two log lines can still be correlated.
    """

    def __init__(self, level: RedactionLevel = RedactionLevel.STANDARD):
        self.level = level
        self.redaction_placeholder = "***REDACTED***"
        self.hash_placeholder = "***HASH:{hash}***"
        self._compile_patterns()

    def _compile_patterns(self) -> None:
        """Compile regex patterns for sensitive data detection."""
        self.patterns: List[Pattern] = []

        if self.level in (RedactionLevel.STANDARD, RedactionLevel.AGGRESSIVE):
            self.patterns.extend([
                re.compile(r'(bearer\s+)([a-zA-Z0-9_\-\.]{8,})', re.IGNORECASE),
                re.compile(r'((?:access|refresh)_token["\s]*[:=]["\s]*)([a-zA-Z0-9_\-\.]+)', re.IGNORECASE),
                re.compile(r'(client_secret["\s]*[:=]["\s]*)([^&\s"]+)', re.IGNORECASE),
                re.compile(r'([?&](?:code|state|client_secret|refresh_token)=)([^&\s]+)', re.IGNORECASE),
            ])

        if self.level == RedactionLevel.AGGRESSIVE:
            # HMAC digests in hex (md5 through sha256)
            self.patterns.append(re.compile(r'(\b)([a-f0-9]{32,64})\b', re.IGNORECASE))

    def redact_dict(self, data: Dict[str, Any], preserve_length: bool = False) -> Dict[str, Any]:
        """
        Recursively redact sensitive data in a dictionary.

        Args:
            data: Dictionary to redact
            preserve_length: Whether to preserve data length in redaction

        Returns:
            Dictionary with sensitive data redacted
        """
        if not isinstance(data, dict):
            return data
        return {key: self.redact_value(key, value, preserve_length) for key, value in data.items()}

    def redact_string(self, text: str) -> str:
        """Redact sensitive information from a free-form string."""
        if not isinstance(text, str) or self.level == RedactionLevel.NONE:
            return text

        redacted_text = text
        for pattern in self.patterns:
            if self.level == RedactionLevel.AGGRESSIVE:
                def replacement(match):
                    prefix, value = match.group(1), match.group(2)
                    digest = hashlib.sha256(value.encode()).hexdigest()[:8]
                    return f"{prefix}{self.hash_placeholder.format(hash=digest)}"
            else:
                def replacement(match):
                    return f"{match.group(1)}{self.redaction_placeholder}"
            redacted_text = pattern.sub(replacement, redacted_text)

        return redacted_text

    def redact_value(self, key: str, value: Any, preserve_length: bool = False) -> Any:
        """
        Redact a value based on its key and content.

        Args:
            key: The field key
            value: The value to potentially redact
            preserve_length: Whether to preserve data length

        Returns:
            Original value or redacted version
        """
        if value is None or self.level == RedactionLevel.NONE:
            return value

        if isinstance(value, dict):
            return self.redact_dict(value, preserve_length)
        if isinstance(value, (list, tuple)):
            redacted = [self.redact_value(key, item, preserve_length) for item in value]
            return type(value)(redacted)

        if _is_sensitive_key(key):
            if preserve_length and isinstance(value, str) and value:
                return "*" * len(value)
            return self.redaction_placeholder

        if isinstance(value, str):
            return self.redact_string(value)

        return value


# ============================================================================
# Formatters
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Example output:
        {"level": "INFO", "logger": "patreon_api.webhook.handlers",
         "message": "Webhook classified", "trigger": "members:create", ...}
    """

    def __init__(self, ensure_ascii: bool = False, sort_keys: bool = True):
        super().__init__()
        self.ensure_ascii = ensure_ascii
        self.sort_keys = sort_keys
        self._redactor = SensitiveDataRedactor(RedactionLevel.STANDARD)

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key not in STANDARD_LOG_FIELDS and key not in log_entry:
                log_entry[key] = self._redactor.redact_value(key, value)

        if record.exc_info:
            log_entry["exception"] = self._redactor.redact_string(
                self.formatException(record.exc_info)
            )

        return json.dumps(
            log_entry,
            default=str,
            ensure_ascii=self.ensure_ascii,
            sort_keys=self.sort_keys
        )


class TextFormatter(logging.Formatter):
    """
    Text formatter for human-readable logging with optional colors.

    Example output:
        [2024-05-01 10:30:45] INFO     patreon_api.oauth:88 - Token exchanged
    """

    def __init__(self, use_colors: bool = True, timestamp_format: Optional[str] = None):
        super().__init__()
        self.use_colors = use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        self.timestamp_format = timestamp_format or DEFAULT_TIMESTAMP_FORMAT

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime(self.timestamp_format)
        message = (
            f"[{timestamp}] {record.levelname:8} "
            f"{record.name}:{record.lineno} - {record.getMessage()}"
        )

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        if self.use_colors:
            color = Colors.LEVEL_COLORS.get(record.levelname, '')
            message = f"{color}{message}{Colors.RESET}"

        return message


# ============================================================================
# Filters
# ============================================================================

class SensitiveDataFilter(logging.Filter):
    """
    Scrubs credentials from log records before any handler sees them.

    Message text goes through pattern redaction; extra fields with a
    sensitive name are replaced outright.
    """

    def __init__(
        self,
        redaction_level: Union[RedactionLevel, str] = RedactionLevel.STANDARD,
        preserve_length: bool = False
    ):
        super().__init__()
        if isinstance(redaction_level, str):
            redaction_level = RedactionLevel(redaction_level.lower())

        self.redactor = SensitiveDataRedactor(redaction_level)
        self.preserve_length = preserve_length
        self.redaction_stats = {"records_processed": 0, "fields_redacted": 0}

    def filter(self, record: logging.LogRecord) -> bool:
        self.redaction_stats["records_processed"] += 1

        if isinstance(record.msg, str):
            original_msg = record.msg
            record.msg = self.redactor.redact_string(record.msg)
            if original_msg != record.msg:
                self.redaction_stats["fields_redacted"] += 1

        for key in list(record.__dict__.keys()):
            if key in STANDARD_LOG_FIELDS or not _is_sensitive_key(key):
                continue
            original_value = getattr(record, key)
            redacted_value = self.redactor.redact_value(key, original_value, self.preserve_length)
            setattr(record, key, redacted_value)
            if original_value != redacted_value:
                self.redaction_stats["fields_redacted"] += 1

        return True

    def reset_stats(self) -> None:
        """Reset redaction statistics."""
        self.redaction_stats = {"records_processed": 0, "fields_redacted": 0}


# ============================================================================
# Setup
# ============================================================================

def validate_log_level(level: str) -> str:
    """
    Validate and normalize log level string.

    Raises:
        ValueError: If the log level is not supported
    """
    if not level:
        raise ValueError("Log level cannot be empty")

    level_upper = level.upper()
    valid_levels = {log_level.value for log_level in LogLevel}
    if level_upper not in valid_levels:
        raise ValueError(f"Invalid log level: {level}. Valid levels: {', '.join(sorted(valid_levels))}")
    return level_upper


def validate_log_format(format_type: str) -> str:
    """
    Validate and normalize log format string.

    Raises:
        ValueError: If the log format is not supported
    """
    if not format_type:
        raise ValueError("Log format cannot be empty")

    format_lower = format_type.lower()
    valid_formats = {log_format.value for log_format in LogFormat}
    if format_lower not in valid_formats:
        raise ValueError(f"Invalid log format: {format_type}. Valid formats: {', '.join(sorted(valid_formats))}")
    return format_lower


def setup_logging(
    level: Optional[Union[str, LogLevel]] = None,
    format_type: Optional[Union[str, LogFormat]] = None,
    log_file: Optional[str] = None,
    use_colors: Optional[bool] = None,
    sanitize_sensitive_data: bool = True,
    redaction_level: Union[RedactionLevel, str] = RedactionLevel.STANDARD,
) -> logging.Logger:
    """
    Configure the ``patreon_api`` logger hierarchy.

    Only the library's own logger is touched so applications keep
    control of the root logger. Arguments left as None fall back to
    the values in ``patreon_api.config.settings``.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format ('json' or 'text')
        log_file: Optional log file path (always written as JSON)
        use_colors: Whether to use colors in text output
        sanitize_sensitive_data: Whether to attach the redaction filter
        redaction_level: Level of sensitive data redaction

    Returns:
        The configured package logger

    Raises:
        ValueError: If the level or format is not supported
    """
    from ..config.settings import settings

    if isinstance(level, LogLevel):
        level = level.value
    if isinstance(format_type, LogFormat):
        format_type = format_type.value

    validated_level = validate_log_level(level or settings.log_level)
    validated_format = validate_log_format(format_type or settings.log_format)
    log_file_path = log_file or settings.log_file

    numeric_level = getattr(logging, validated_level, logging.INFO)

    logger = logging.getLogger("patreon_api")
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    filters: List[logging.Filter] = []
    if sanitize_sensitive_data:
        filters.append(SensitiveDataFilter(redaction_level=redaction_level))

    if validated_format == LogFormat.JSON.value:
        console_formatter: logging.Formatter = JSONFormatter()
    else:
        console_formatter = TextFormatter(use_colors=True if use_colors is None else use_colors)

    logger.addHandler(_create_handler(logging.StreamHandler(sys.stdout), numeric_level, console_formatter, filters))

    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
        logger.addHandler(_create_handler(file_handler, numeric_level, JSONFormatter(), filters))

    return logger


def _create_handler(
    handler: logging.Handler,
    level: int,
    formatter: logging.Formatter,
    filters: List[logging.Filter]
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    for filter_obj in filters:
        handler.addFilter(filter_obj)
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__)
    """
    return logging.getLogger(name)


class APILogger:
    """Logs outbound Patreon requests and responses with redaction applied."""

    def __init__(self, logger_name: str = "patreon_api.http", redaction_level: RedactionLevel = RedactionLevel.STANDARD):
        self.logger = get_logger(logger_name)
        self.redactor = SensitiveDataRedactor(redaction_level)

    def log_request(self, method: str, url: str, params: Optional[Dict[str, Any]] = None) -> None:
        self.logger.debug(
            f"{method} {self.redactor.redact_string(url)}",
            extra={
                "http_method": method,
                "url": self.redactor.redact_string(url),
                "params": self.redactor.redact_dict(params or {}),
            }
        )

    def log_response(self, method: str, url: str, status_code: int, elapsed_ms: Optional[float] = None) -> None:
        level = logging.WARNING if status_code >= 400 else logging.DEBUG
        self.logger.log(
            level,
            f"{method} {self.redactor.redact_string(url)} -> {status_code}",
            extra={
                "http_method": method,
                "status_code": status_code,
                "elapsed_ms": elapsed_ms,
            }
        )

    def log_error(self, method: str, url: str, error: Exception) -> None:
        self.logger.error(
            f"{method} {self.redactor.redact_string(url)} failed: {self.redactor.redact_string(str(error))}",
            extra={"http_method": method, "error_type": type(error).__name__}
        )


api_logger = APILogger()
