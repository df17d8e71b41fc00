"""Script to run the market simulation with structured logging and error handling."""

import logging
import os
import signal
import sys
from typing import Optional

from .config import load_config
from .settings import settings
from .simulation import Simulation

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    """Configure logging for the simulation."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _setup_signal_handlers(simulation: Simulation) -> None:
    """Setup signal handlers for graceful shutdown."""
    def signal_handler(signum, frame):
        logger.info("Received signal %d, initiating shutdown...", signum)
        simulation.request_stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def _resolve_config_path(argv) -> Optional[str]:
    config_path = argv[1] if len(argv) > 1 else settings.config_path
    if os.path.exists(config_path):
        logger.info("Loading config from: %s", config_path)
        return config_path
    logger.warning("Config file not found: %s, using defaults", config_path)
    return None


def main(argv=None) -> int:
    """Main entry point."""
    _setup_logging()
    argv = sys.argv if argv is None else argv

    try:
        config = load_config(_resolve_config_path(argv))
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    simulation = Simulation(config)

    if sys.platform != "win32":  # Signal handlers don't work well on Windows
        _setup_signal_handlers(simulation)

    try:
        reports = simulation.run(timeout=settings.shutdown_timeout)
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        simulation.stop(settings.shutdown_timeout)
        return 1

    for report in reports:
        logger.info(
            "%s: cash=%.2f pnl=%.2f positions=%d trades=%d skipped=%d",
            report.username, report.cash, report.pnl,
            len(report.positions), len(report.trades), report.skipped,
        )
    return 1 if simulation.runner.failed_agents() else 0


if __name__ == "__main__":
    sys.exit(main())
