"""Structured logging setup using structlog.

Every event carries ``service="hosuto"`` plus whatever the request
middleware has bound into the context (``request_id``, ``path``), so a
single line of output can be traced back to the request that produced it.

Two renderers share one processor chain: a coloured console renderer for
local work and JSON for production.  JSON is chosen when ``APP_ENV`` is
``production`` or when ``json_output=True`` is passed.

uvicorn, httpx and aiosqlite log through the standard library; their
records are routed through the same chain.  The HTTP and SQLite client
libraries are held at WARNING or above, because one image request would
otherwise emit a line per upstream call.
"""

import logging
import os
import sys

import structlog

SERVICE_NAME = "hosuto"

# Client libraries that log every call at INFO/DEBUG.
_QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def _tag_service(
    logger: object, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _processor_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        _tag_service,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _select_renderer(use_json: bool) -> structlog.types.Processor:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _route_stdlib(level: int, chain: list, renderer: structlog.types.Processor) -> None:
    """Send standard-library records through *chain* and *renderer*."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *chain,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, level))


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and the stdlib bridge.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.  Unknown names
                   fall back to INFO.
        json_output: Force JSON output regardless of ``APP_ENV``.

    Returns:
        A logger bound to the service name.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"
    chain = _processor_chain()
    renderer = _select_renderer(use_json)

    structlog.configure(
        processors=[*chain, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        # Off so that a later call (the CLI lowers the level) takes effect
        # on loggers that modules created at import time.
        cache_logger_on_first_use=False,
    )
    _route_stdlib(level, chain, renderer)

    return structlog.get_logger(logger_name=SERVICE_NAME)


def get_logger(name: str) -> structlog.BoundLogger:
    """Named structlog logger; configures defaults if nothing has yet."""
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
