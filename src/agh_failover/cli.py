"""CLI entrypoint for AdGuard Home DNS failover."""

import sys
from datetime import UTC, datetime

import structlog
from pydantic import ValidationError

from .config import get_settings
from .controller import FailoverController
from .exceptions import FailoverError

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(0),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def main() -> int:
    """Main entrypoint, run once per cron tick."""
    logger.info(
        "Starting DNS failover check",
        timestamp=datetime.now(UTC).isoformat(),
    )

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error("Invalid configuration", error=str(e))
        return 1

    try:
        controller = FailoverController.from_settings(settings)
        outcome = controller.run()
    except FailoverError as e:
        logger.exception("Failover check aborted", error=str(e))
        return 1
    except Exception as e:
        logger.exception("Failover check failed with error", error=str(e))
        return 1

    if outcome.skipped:
        return 0

    logger.info(
        "DNS failover check complete",
        state=outcome.target_state.value if outcome.target_state else None,
        transition=outcome.transition.kind.value if outcome.transition else None,
        config_written=outcome.config_written,
        reloaded=outcome.reloaded,
        notified=outcome.notified,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
