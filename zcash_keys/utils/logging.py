import json
import logging
import logging.handlers
import os
import sys
import threading
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

ROOT_LOGGER = "zcash_keys"
REDACTED = "[redacted]"

class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

class LogFormat(Enum):
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"

class StructuredFormatter(logging.Formatter):
    """Renders a record together with the keyword data KeyLogger attached to it"""

    def __init__(self, fmt_type: LogFormat = LogFormat.DETAILED):
        super().__init__()
        self.fmt_type = fmt_type

    def format(self, record: logging.LogRecord) -> str:
        data = getattr(record, 'structured_data', {})
        if self.fmt_type == LogFormat.SIMPLE:
            return f"{record.levelname}: {record.getMessage()}"
        if self.fmt_type == LogFormat.JSON:
            entry = {
                "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
            if data:
                entry["data"] = data
            if record.exc_info:
                entry["exception"] = self.formatException(record.exc_info)
            return json.dumps(entry, default=str)

        line = (f"{datetime.fromtimestamp(record.created):%Y-%m-%d %H:%M:%S} | "
                f"{record.levelname:8} | {record.name} | {record.getMessage()}")
        if data:
            line += f" | {json.dumps(data, default=str)}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line

def redact(secret: str) -> str:
    """
    Masked form of a registered secret.

    Bech32 encoded keys keep their human-readable part so the kind of key is
    still visible; anything else (mnemonics, seeds) is replaced entirely.
    """
    hrp, sep, _ = secret.rpartition('1')
    if sep and hrp.startswith("secret-"):
        return f"{hrp}1{REDACTED}"
    return REDACTED

class SensitiveDataFilter(logging.Filter):
    """Masks registered secrets (encoded spending keys, mnemonics, seeds) in log records"""

    def __init__(self):
        super().__init__()
        self._secrets = set()
        self._lock = threading.Lock()

    def add(self, secret: str) -> None:
        if secret and len(secret) > 8:
            with self._lock:
                self._secrets.add(secret)

    def discard(self, secret: str) -> None:
        with self._lock:
            self._secrets.discard(secret)

    def __contains__(self, secret: str) -> bool:
        return secret in self._secrets

    def mask(self, value: Any) -> Any:
        if isinstance(value, str):
            # Longest first, so a phrase is not half-masked by one of its substrings
            for secret in sorted(self._secrets, key=len, reverse=True):
                if secret in value:
                    value = value.replace(secret, redact(secret))
            return value
        if isinstance(value, dict):
            return {k: self.mask(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return type(value)(self.mask(v) for v in value)
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        if self._secrets:
            record.msg = self.mask(record.msg)
            if record.args:
                record.args = self.mask(record.args)
            if hasattr(record, 'structured_data'):
                record.structured_data = self.mask(record.structured_data)
        return True

class LogManager:
    """Process-wide logging state for the zcash_keys logger tree"""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance.loggers = {}
                instance.sensitive_filter = SensitiveDataFilter()
                cls._instance = instance
            return cls._instance

    def configure(self, level: LogLevel, log_format: LogFormat, log_file: Optional[str] = None,
                  max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5) -> None:
        """Replace the handlers of the zcash_keys logger"""
        root = logging.getLogger(ROOT_LOGGER)
        root.handlers.clear()
        root.setLevel(getattr(logging, level.value))

        handlers = [logging.StreamHandler(sys.stdout)]
        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handlers.append(logging.handlers.RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'))

        formatter = StructuredFormatter(log_format)
        for handler in handlers:
            handler.setFormatter(formatter)
            handler.addFilter(self.sensitive_filter)
            root.addHandler(handler)

    def get_logger(self, name: str) -> 'KeyLogger':
        if name not in self.loggers:
            self.loggers[name] = KeyLogger(name)
        return self.loggers[name]

class KeyLogger:
    """Logger wrapper: keyword arguments become the record's structured data"""

    def __init__(self, name: str = ROOT_LOGGER):
        self.name = name
        self.logger = logging.getLogger(name)

    def _log(self, level: int, msg: str, data: Dict[str, Any]) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, msg, extra={'structured_data': data})

    def debug(self, msg: str, **kwargs) -> None:
        self._log(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs) -> None:
        self._log(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs) -> None:
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs) -> None:
        self._log(logging.ERROR, msg, kwargs)

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None,
                  log_format: str = "detailed", max_bytes: int = 10 * 1024 * 1024,
                  backup_count: int = 5) -> None:
    """Send zcash_keys logs to stdout, and to a rotating file when ``log_file`` is given"""
    LogManager().configure(LogLevel(log_level.upper()), LogFormat(log_format.lower()),
                           log_file, max_bytes, backup_count)

def get_logger(name: str) -> KeyLogger:
    return LogManager().get_logger(name)

def register_secret(secret: str) -> None:
    """Mask ``secret`` in everything zcash_keys logs from now on"""
    LogManager().sensitive_filter.add(secret)
