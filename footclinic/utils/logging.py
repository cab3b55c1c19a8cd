"""
Structured Logging Configuration

One console line per record: UTC timestamp, level, logger name, message and
any clinic context passed through ``extra`` (episode, patient, referral,
role), e.g.::

    [2024-03-01T10:00:00+00:00] INFO     [footclinic.core.referrals.inbox] Referral opened episode=E1 role=Médico Diabetología
"""
import logging
import sys
from typing import Optional
from datetime import datetime, timezone

# Record attributes rendered as key=value when a caller passes them in ``extra``
CONTEXT_FIELDS = ("episode_id", "patient_id", "referral_id", "role", "store")

# uvicorn logs every request at INFO; the clinic only needs its own lines
QUIET_LOGGERS = ("uvicorn.access",)


class StructuredFormatter(logging.Formatter):
    """Single-line formatter with optional ANSI colours and clinic context."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    @staticmethod
    def context(record: logging.LogRecord) -> str:
        parts = []
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                parts.append(f"{name.replace('_id', '')}={value}")
        return " ".join(parts)

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat()

        if self.use_colors:
            color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
            reset = self.COLORS['RESET']
        else:
            color = reset = ""

        message = record.getMessage()
        context = self.context(record)
        if context:
            message = f"{message} {context}"

        log_message = (
            f"{color}[{timestamp}] "
            f"{record.levelname:8} "
            f"[{record.name}] "
            f"{message}{reset}"
        )

        if record.exc_info:
            log_message += f"\n{self.formatException(record.exc_info)}"

        return log_message


class PlainFileFormatter(StructuredFormatter):
    """Pipe-separated variant for log files, never coloured."""

    def __init__(self):
        super().__init__(use_colors=False)

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        line = f"{timestamp} | {record.levelname} | {record.name} | {record.getMessage()}"
        context = self.context(record)
        if context:
            line += f" | {context}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure application-wide logging.

    Called once by the API entry point; library code only asks for loggers.

    Args:
        level: Logging level name. Unknown names fall back to INFO.
        log_file: Optional file path for an additional plain-text log.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter(use_colors=sys.stdout.isatty()))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(PlainFileFormatter())
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for a clinic module (pass ``__name__``)."""
    return logging.getLogger(name)
