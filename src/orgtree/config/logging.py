"""Route stdlib and structlog records through one stderr handler.

Library modules log with ``logging.getLogger(__name__)``; telemetry logs
with ``structlog.get_logger``. Both end up in the same
:class:`structlog.stdlib.ProcessorFormatter`, rendered either for a
terminal or as JSON lines (``--log-json``).
"""

from __future__ import annotations

import logging
import sys

import structlog

# Third-party loggers that stay at WARNING even under --verbose.
_PINNED_LEVELS: dict[str, int] = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
}

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler; ``orgtree.*`` logs at DEBUG when *verbose*.

    Safe to call repeatedly: the root logger ends up with exactly one handler.
    """
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger("orgtree").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name, level in _PINNED_LEVELS.items():
        logging.getLogger(name).setLevel(level)
