"""Log setup for the API process: one stdout handler, JSON in production, correlation ids."""

import contextvars
import logging
import sys
import traceback
import uuid
from pathlib import Path
from typing import Any

from pythonjsonlogger.json import JsonFormatter

# Hey future me, one id per request, attached to every line logged while serving it (Sheets
# calls, MusicBrainz calls, the error handler). A user reporting "saving failed at 14:02"
# gives you the X-Correlation-ID from the response and you grep for it. Startup and the
# background invalidation task run outside a request, hence the "" default.
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

PACKAGE_NAME = "discovinyl"

JSON_FORMAT = "%(timestamp)s %(level)s %(name)s %(message)s"
TEXT_FORMAT = "%(asctime)s │ %(levelname)-7s │ %(name)s:%(lineno)d │ %(message)s"

# Chatty libraries. uvicorn.access repeats what RequestLoggingMiddleware already logs.
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "google.auth", "uvicorn.access")


def get_correlation_id() -> str:
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Store the request's correlation id, generating a UUID4 when none was sent."""
    value = correlation_id or str(uuid.uuid4())
    correlation_id_var.set(value)
    return value


class CorrelationIdFilter(logging.Filter):
    """Stamp each record with the current correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def _exception_chain(exc: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    # root cause first
    return chain[::-1]


def _own_frames(exc: BaseException) -> list[traceback.FrameSummary]:
    if exc.__traceback__ is None:
        return []
    return [
        frame
        for frame in traceback.extract_tb(exc.__traceback__)
        if PACKAGE_NAME in frame.filename and "/site-packages/" not in frame.filename
    ]


class CompactExceptionFormatter(logging.Formatter):
    """Dev-console formatter: one "╰─►" line per chained exception, our frames only."""

    def formatException(self, ei: Any) -> str:
        exc_value = ei[1]
        if exc_value is None:
            return ""

        out: list[str] = []
        for exc in _exception_chain(exc_value):
            out.append(f"╰─► {type(exc).__name__}: {exc}")
            for frame in _own_frames(exc):
                out.append(f'    {Path(frame.filename).name}:{frame.lineno} in {frame.name}')
                if frame.line:
                    out.append(f"      {frame.line.strip()}")
        return "\n".join(out)


class CustomJsonFormatter(JsonFormatter):
    """One JSON object per line with level, logger, source location and correlation id."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            timestamp=self.formatTime(record, self.datefmt),
            level=record.levelname,
            logger=record.name,
            source=f"{record.module}.{record.funcName}:{record.lineno}",
        )
        correlation_id = getattr(record, "correlation_id", "")
        if correlation_id:
            log_record["correlation_id"] = correlation_id
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)


def _build_formatter(json_format: bool, app_name: str) -> logging.Formatter:
    if json_format:
        return CustomJsonFormatter(
            JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S", static_fields={"app": app_name}
        )
    return CompactExceptionFormatter(fmt=TEXT_FORMAT, datefmt="%H:%M:%S")


# Listen future me, this REPLACES the root handlers instead of adding one, so the lifespan and
# tests can call it repeatedly without doubling every line.
def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = PACKAGE_NAME,
) -> None:
    """Install the stdout handler on the root logger.

    Args:
        log_level: Level name; unknown names fall back to INFO
        json_format: JSON lines (production) instead of the compact console format
        app_name: Added to every JSON line as "app"
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(_build_formatter(json_format, app_name))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured (level=%s, json=%s)", logging.getLevelName(level), json_format
    )
