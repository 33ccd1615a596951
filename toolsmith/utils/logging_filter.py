"""
Logging filter that keeps LLM credentials out of log output
"""

import logging
import re
from typing import Any


_SECRET_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r'(api[_-]?key["\']?\s*[:=]\s*["\']?)[\w-]{10,}',
        r'(token["\']?\s*[:=]\s*["\']?)[\w-]{10,}',
        r'(bearer\s+)[\w-]{10,}',
        # Anthropic first, its keys also begin with "sk-"
        r'(sk-ant-)[\w-]{20,}',
        r'(sk-)[\w-]{20,}',
    )
)

MASK = "***REDACTED***"

# Loggers that can see the configured key before handlers are attached
_FILTERED_LOGGERS = ("toolsmith", "uvicorn", "uvicorn.access", "uvicorn.error")


def redact(text: str) -> str:
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(rf"\1{MASK}", text)
    return text


def _redact_arg(value: Any) -> Any:
    return redact(value) if isinstance(value, str) else value


class SensitiveDataFilter(logging.Filter):
    """Masks keys in the message template, its arguments and cached tracebacks"""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = redact(str(record.msg))
        if isinstance(record.args, dict):
            record.args = {key: _redact_arg(value) for key, value in record.args.items()}
        elif record.args:
            record.args = tuple(_redact_arg(arg) for arg in record.args)
        if record.exc_text:
            record.exc_text = redact(record.exc_text)
        return True


def setup_secure_logging() -> SensitiveDataFilter:
    """Install one shared filter on the root handlers and the named loggers"""
    secret_filter = SensitiveDataFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(secret_filter)
    for name in _FILTERED_LOGGERS:
        logging.getLogger(name).addFilter(secret_filter)
    return secret_filter
