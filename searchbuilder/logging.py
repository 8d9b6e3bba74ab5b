import logging
import re
import sys

import structlog

from searchbuilder.constants import LOG_BINDINGS_LIMIT

_WHITESPACE_RE = re.compile(r"\s+")


def compact_sql(_logger, _method_name: str, event_dict: dict) -> dict:
    """Keep statement events on one line and cap long binding lists."""
    sql = event_dict.get("sql")
    if isinstance(sql, str):
        event_dict["sql"] = _WHITESPACE_RE.sub(" ", sql).strip()
    bindings = event_dict.get("bindings")
    if isinstance(bindings, list) and len(bindings) > LOG_BINDINGS_LIMIT:
        hidden = len(bindings) - LOG_BINDINGS_LIMIT
        event_dict["bindings"] = [*bindings[:LOG_BINDINGS_LIMIT], f"... +{hidden} more"]
    return event_dict


def build_processors(colors: bool = True) -> list:
    return [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%H:%M:%S"),
        compact_sql,
        structlog.dev.ConsoleRenderer(colors=colors),
    ]


def configure_logging(level: str = "INFO", colors: bool | None = None):
    if colors is None:
        colors = sys.stderr.isatty()
    structlog.configure(
        processors=build_processors(colors),
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
    )
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str | None = None):
    return structlog.get_logger(name or "searchbuilder")
