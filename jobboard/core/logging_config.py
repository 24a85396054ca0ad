"""
Structured logging for the job board.

Every module logs through ``get_logger(__name__)`` with key-value context:

    logger.info("Application submitted", job_post_id=1, user_id=7)

Development gets colored console lines with the call site attached; every
other environment emits one JSON object per line so logs can be shipped
and queried as-is.
"""

import logging
import sys
from typing import List, Optional

import structlog
from structlog.types import Processor

from jobboard.core.config import settings, is_development

# Libraries that are chatty at INFO and below
QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "uvicorn.access": logging.WARNING,
    "multipart": logging.WARNING,
    "asyncio": logging.WARNING,
    "passlib": logging.ERROR,
}


# =============================================================================
# Setup
# =============================================================================

def _processors(dev: bool) -> List[Processor]:
    processors: List[Processor] = [
        # request_id and anything else bound with bind_contextvars
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if dev:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.JSONRenderer())

    return processors


def setup_logging() -> None:
    """
    Route structlog through the stdlib root logger on stdout.

    Called from the app lifespan and by the admin CLI. Calling it again
    replaces the previous handlers.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    # structlog renders the full line; the handler only writes it
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt="%(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    structlog.configure(
        processors=_processors(is_development()),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


class LoggingContextManager:
    """
    Bind key-value pairs to every log line emitted inside the block.

        with LoggingContextManager(request_id=request_id):
            ...
    """

    def __init__(self, **context):
        self.context = context

    def __enter__(self):
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        structlog.contextvars.unbind_contextvars(*self.context)
        return False


# =============================================================================
# HTTP access log
# =============================================================================

def log_request(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    user_id: Optional[int] = None,
    **extra
) -> None:
    """
    One line per finished request.

    5xx responses log at error, 4xx at warning, the rest at info. Redirects
    from the admin gate (302) therefore stay at info; the gate logs its own
    warning.
    """
    fields = dict(
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=round(duration_ms, 2),
        **extra,
    )
    if user_id is not None:
        fields["user_id"] = user_id

    logger = get_logger("jobboard.http")
    if status_code >= 500:
        logger.error("Request failed", **fields)
    elif status_code >= 400:
        logger.warning("Request rejected", **fields)
    else:
        logger.info("Request handled", **fields)
