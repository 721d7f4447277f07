"""Unified logging configuration for the command-line entrypoints.

Provides:
    - Console (stderr) and optional file handler
    - JSON output mode for ingestion
    - Contextual fields (job, config) attached to every record
    - Warning capture (Python warnings -> logging)

G-code goes to stdout; logs never do, so a program can be piped straight
to a sender while progress is still visible.

Public API:
    setup_logging(log_level="INFO", context={"app": "cut-dado"})
    get_logger(name)
    push_context(job="shelf")
    pop_context(keys=["job"])

Format examples:
    Human: 2026-10-18T13:45:12.345Z | INFO     | app=cut-dado | Message
    JSON: {"t":"2026-10-18T13:45:12.345+00:00","lvl":"INFO","msg":"..."}

Context uses contextvars.
Idempotent: repeated setup_logging() calls don't duplicate handlers.
"""

import contextvars
import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

_context_var = contextvars.ContextVar('logging_context', default={})

# Handlers installed by setup_logging (removed on reconfiguration)
_installed: List[logging.Handler] = []


class ContextFormatter(logging.Formatter):
    """Formatter that includes contextual fields.

    Supports:
        - Human-readable format with colors (optional)
        - JSON format for machine ingestion
        - Contextual fields from push_context()
    """

    def __init__(
        self,
        fmt_mode: str = "human",
        use_color: bool = True,
    ):
        super().__init__()
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()

        self.colors = {
            'DEBUG': '\033[36m',
            'INFO': '\033[32m',
            'WARNING': '\033[33m',
            'ERROR': '\033[31m',
            'CRITICAL': '\033[35m',
            'RESET': '\033[0m'
        }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record."""
        context = _context_var.get({})

        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)

        if self.fmt_mode == "json":
            return self._format_json(record, ts, context)
        return self._format_human(record, ts, context)

    def _format_json(
        self,
        record: logging.LogRecord,
        ts: datetime,
        context: dict
    ) -> str:
        log_dict = {
            't': ts.isoformat(),
            'lvl': record.levelname,
            'name': record.name,
            'pid': os.getpid(),
            'msg': record.getMessage()
        }
        log_dict.update(context)

        if record.exc_info:
            log_dict['exc'] = self.formatException(record.exc_info)

        return json.dumps(log_dict)

    def _format_human(
        self,
        record: logging.LogRecord,
        ts: datetime,
        context: dict
    ) -> str:
        ts_str = ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'

        level = record.levelname
        if self.use_color:
            level = f"{self.colors.get(level, '')}{level:8s}{self.colors['RESET']}"
        else:
            level = f"{level:8s}"

        parts = [ts_str, '|', level, '|']
        context_str = ' '.join(f"{k}={v}" for k, v in context.items())
        if context_str:
            parts.append(f"{context_str} |")
        parts.append(record.getMessage())

        line = ' '.join(parts)
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    capture_warnings: bool = True,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Configure root logger (idempotent).

    Parameters
    ----------
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
    log_file : str, optional
        Log file path; None for no file logging
    json : bool
        Use JSON lines for console and file output, default False
    color : bool
        Use ANSI colors in console output, default True
    to_stderr : bool
        Log to stderr, default True
    capture_warnings : bool
        Capture Python warnings to logging, default True
    context : dict, optional
        Initial contextual fields (e.g., {"app": "cut-dado"})

    Returns
    -------
    list[logging.Handler]
        Handlers installed on the root logger.

    Raises
    ------
    ValueError
        If *log_level* is not a logging level name.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    root = logging.getLogger()
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()

    root.setLevel(level)
    fmt_mode = "json" if json else "human"

    if to_stderr:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ContextFormatter(fmt_mode, color))
        root.addHandler(console_handler)
        _installed.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(ContextFormatter(fmt_mode, use_color=False))
        root.addHandler(file_handler)
        _installed.append(file_handler)

    if context:
        push_context(**context)

    if capture_warnings:
        logging.captureWarnings(True)

    return list(_installed)


def get_logger(name: str) -> logging.Logger:
    """Get logger by name (typically __name__)."""
    return logging.getLogger(name)


def push_context(**kwargs) -> None:
    """Add contextual fields to all subsequent log records.

    Examples
    --------
    >>> push_context(app="cut-dado")
    >>> logger.info("Started")  # -> "... | app=cut-dado | Started"
    """
    current = _context_var.get({})
    _context_var.set({**current, **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove contextual fields; all of them when *keys* is None."""
    if keys is None:
        _context_var.set({})
        return
    current = dict(_context_var.get({}))
    for key in keys:
        current.pop(key, None)
    _context_var.set(current)
