"""
Logging setup and configuration for Folio.

Records go through structlog into the standard ``logging`` module. The
console renderer is meant for people at a terminal; ``--log-format json``
emits one JSON object per line for CI. Records default to stderr so that
report output on stdout stays machine-readable.
"""

import logging
import sys
import time
import uuid
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import IO, Any, Generator, Optional

import structlog
from structlog.types import Processor

# One id per process, attached to every record
_session_id: Optional[str] = None

_logging_configured = False

# File opened for a path-valued ``output``; closed on reconfiguration
_log_file: Optional[IO[str]] = None


def get_session_id() -> str:
    """Get or create the id that correlates records of one invocation."""
    global _session_id
    if _session_id is None:
        _session_id = uuid.uuid4().hex[:8]
    return _session_id


def _open_stream(output: str) -> IO[str]:
    global _log_file
    if _log_file is not None:
        _log_file.close()
        _log_file = None

    if output == "stdout":
        return sys.stdout
    if output == "stderr":
        return sys.stderr

    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    _log_file = path.open("a", encoding="utf-8")
    return _log_file


def _renderer(format_type: str, stream: IO[str]) -> Processor:
    if format_type == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=stream.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def setup_logging(
    level: str = "WARNING",
    format_type: str = "console",
    output: str = "stderr",
) -> None:
    """
    Configure logging for Folio.

    Calling it again replaces the previous configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "console" or "json"
        output: "stdout", "stderr", or a file path to append to
    """
    global _logging_configured

    stream = _open_stream(output)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if format_type == "json":
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer(format_type, stream))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, level.upper(), logging.WARNING),
        force=True,
    )
    logging.getLogger("dynaconf").setLevel(logging.WARNING)

    _logging_configured = True

    get_logger(__name__).debug(
        "logging_initialized",
        level=level,
        format=format_type,
        output=output,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a logger bound with the session id.

    Configures logging with the defaults if nothing has yet.
    """
    if not _logging_configured:
        setup_logging()
    return structlog.get_logger(name).bind(session_id=get_session_id())


@contextmanager
def bound_post(path: Path) -> Generator[None, None, None]:
    """Attach the post path to every record emitted inside the block."""
    with structlog.contextvars.bound_contextvars(post=str(path)):
        yield


def log_execution_start(command: str, options: Optional[dict] = None) -> float:
    """
    Log that a command started.

    Returns:
        perf_counter value to pass to ``log_execution_end``
    """
    get_logger("folio.execution").info(
        "execution_started",
        command=command,
        options=_plain_options(options) if options else None,
        started_at=datetime.now(tz=UTC).isoformat(),
    )
    return time.perf_counter()


def log_execution_end(
    command: str,
    start_time: float,
    status: str = "success",
    result: Optional[dict] = None,
) -> None:
    """Log that a command finished, with its duration and result summary."""
    get_logger("folio.execution").info(
        "execution_completed",
        command=command,
        status=status,
        duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        result=result,
    )


def log_error(
    error: Exception,
    context: Optional[dict] = None,
    command: Optional[str] = None,
) -> None:
    """Log an exception together with its Folio error code, if it has one."""
    get_logger("folio.error").error(
        "error_occurred",
        error_type=type(error).__name__,
        error_code=getattr(error, "error_code", None),
        error_message=str(error).splitlines()[0] if str(error) else "",
        command=command,
        context=context,
        exc_info=error,
    )


@contextmanager
def log_execution_context(
    command: str,
    options: Optional[dict] = None,
) -> Generator[dict[str, Any], None, None]:
    """
    Time a command and log its start, end and any exception.

    The yielded dictionary is logged as the result summary, so callers can
    record counts as they go.

    Usage:
        with log_execution_context("folio lint", {"strict": True}) as summary:
            summary["files"] = 3
    """
    start_time = log_execution_start(command, options)
    summary: dict[str, Any] = {}
    status = "success"

    try:
        yield summary
    except Exception as e:
        status = "error"
        summary["error_type"] = type(e).__name__
        log_error(e, command=command)
        raise
    finally:
        log_execution_end(command, start_time, status, summary or None)


def _plain_options(options: dict) -> dict:
    """Paths become strings so every renderer can serialize the options."""
    plain: dict[str, Any] = {}
    for key, value in options.items():
        if isinstance(value, Path):
            plain[key] = str(value)
        elif isinstance(value, (list, tuple)):
            plain[key] = [str(v) if isinstance(v, Path) else v for v in value]
        elif isinstance(value, dict):
            plain[key] = _plain_options(value)
        else:
            plain[key] = value
    return plain
