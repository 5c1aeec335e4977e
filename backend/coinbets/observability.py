"""Logfire cloud observability initialization and instrumentation."""

import logging

import logfire
from sqlalchemy.engine import Engine

from coinbets import __version__
from coinbets.config import Settings

logger = logging.getLogger(__name__)


def initialize_logfire(settings: Settings, engine: Engine | None = None) -> None:
    """
    Initialize Logfire and bridge the standard logging records to it.

    Call once at startup, before the ledger is opened. When an engine is
    given, its SQL statements are traced as well.
    """
    if not settings.logfire_token:
        logger.warning("Logfire token not set - observability disabled")
        return

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="coinbets",
            service_version=__version__,
        )

        root_logger = logging.getLogger()
        root_logger.addHandler(logfire.LogfireLoggingHandler())

        if engine is not None:
            logfire.instrument_sqlalchemy(engine=engine)

        logger.info("Logfire tracking initialized")

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
        # Continue running - observability is optional
