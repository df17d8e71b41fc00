"""Simulation lifecycle: feeds in the background, agents to completion."""

import logging
import random
import threading
from typing import List, Optional

from .agents.agent_runner import AgentRunner
from .config import SimulationConfiguration
from .reporting import AgentReport
from .services.instrument_registry import InstrumentRegistry
from .services.ledger_registry import LedgerRegistry
from .services.market_feed import FeedManager

logger = logging.getLogger(__name__)


class Simulation:
    """Owns the registries, the feeds and the agent population of one run."""

    def __init__(self, config: SimulationConfiguration):
        """
        Initialize simulation.

        Args:
            config: Validated simulation configuration
        """
        self.config = config
        self.rng = random.Random(config.seed)
        self.instruments = InstrumentRegistry.from_seeds(config.instruments)
        self.ledgers = LedgerRegistry(starting_cash=config.starting_cash)
        self.feeds = FeedManager(
            interval=config.feed_interval,
            rng=random.Random(self.rng.getrandbits(64)),
        )
        self.runner = AgentRunner(
            config,
            self.instruments,
            self.ledgers,
            rng=random.Random(self.rng.getrandbits(64)),
        )
        self.reports: List[AgentReport] = []
        self._shutdown_event = threading.Event()

    def start(self):
        """Start all feeds, then all agents."""
        self.feeds.bootstrap(self.instruments.list_instruments())
        self.runner.create_agents()
        self.runner.start_all()

    def wait(self, timeout: Optional[float] = None) -> List[AgentReport]:
        """Wait for every agent to finish and collect their reports."""
        self.reports = self.runner.wait_all(timeout)
        return self.reports

    def stop(self, timeout: Optional[float] = None):
        """Stop agents and feeds. Safe to call more than once."""
        if self._shutdown_event.is_set():
            return
        self._shutdown_event.set()
        self.runner.stop_all(timeout)
        stuck = self.feeds.stop_all(timeout)
        if stuck:
            logger.warning("Abandoning %d feeds on shutdown", len(stuck))

    def run(self, timeout: Optional[float] = None) -> List[AgentReport]:
        """Start everything, wait for the agents, then stop the feeds."""
        logger.info(
            "Starting simulation: %d instruments, %d agents, %d actions each",
            len(self.instruments), len(self.config.usernames), self.config.actions_per_agent,
        )
        try:
            self.start()
            reports = self.wait()
        finally:
            self.stop(timeout)
        logger.info("Simulation finished")
        return reports

    def request_stop(self):
        """Ask running agents to wrap up early; ``run`` then finishes normally."""
        logger.info("Stop requested")
        self.runner.request_stop()

    @property
    def stopped(self) -> bool:
        return self._shutdown_event.is_set()
