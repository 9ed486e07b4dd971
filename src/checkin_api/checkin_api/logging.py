from __future__ import annotations

import logging

import structlog


def setup_logging(level: str = "INFO") -> structlog.stdlib.BoundLogger:
    """Configure structlog once and return the application logger.

    Services receive (a bound child of) the returned logger through their
    constructors instead of reaching for a module global.
    """
    level = (level or "INFO").upper()
    logging.basicConfig(format="%(message)s", level=getattr(logging, level, logging.INFO))
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger("checkin_api")
