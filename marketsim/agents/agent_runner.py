"""Manages the population of trading agents."""

import logging
import random
import threading
from typing import List, Optional

from ..config import SimulationConfiguration
from ..reporting import AgentReport
from ..services.instrument_registry import InstrumentRegistry
from ..services.ledger_registry import LedgerRegistry
from .strategies.random_strategy import RandomStrategy
from .trading_agent import TradingAgent

logger = logging.getLogger(__name__)


class AgentRunner:
    """
    Creates, starts and joins one trading agent per configured username.

    Every agent shares the same registries but owns its own ledger and its own
    random generator, seeded from the runner's so a fixed seed reproduces each
    agent's decisions.
    """

    def __init__(self, config: SimulationConfiguration, instruments: InstrumentRegistry,
                 ledgers: LedgerRegistry, rng: Optional[random.Random] = None):
        self.config = config
        self.instruments = instruments
        self.ledgers = ledgers
        self.rng = rng or random.Random(config.seed)
        self.agents: List[TradingAgent] = []
        self.running = False
        self._stop_requested = threading.Event()

    def create_agents(self) -> List[TradingAgent]:
        """
        Create agent instances based on configuration.

        Returns:
            List of created agent instances
        """
        if self.agents:
            logger.warning("Agents already created. Skipping creation.")
            return self.agents

        for username in self.config.usernames:
            strategy = RandomStrategy(
                max_quantity=self.config.max_quantity,
                rng=random.Random(self.rng.getrandbits(64)),
            )
            agent = TradingAgent(
                username=username,
                instruments=self.instruments,
                ledgers=self.ledgers,
                actions=self.config.actions_per_agent,
                trade_interval=self.config.trade_interval,
                strategy=strategy,
            )
            self.agents.append(agent)
            logger.info(
                "Created %s | actions=%d | interval=%.2fs | max_qty=%d",
                username,
                self.config.actions_per_agent,
                self.config.trade_interval,
                self.config.max_quantity,
            )

        logger.info("Created %d agents from config", len(self.agents))
        return self.agents

    def start_all(self):
        """Start every agent on its own thread."""
        if self.running:
            logger.warning("Agents already running")
            return
        if not self.agents:
            logger.error("No agents created. Call create_agents() first.")
            return

        self.running = True
        for agent in self.agents:
            # A stop requested while agents were being created still applies.
            if self._stop_requested.is_set():
                agent.stop()
            agent.start()
        logger.info("Started %d agents", len(self.agents))

    def wait_all(self, timeout: Optional[float] = None) -> List[AgentReport]:
        """
        Block until every agent is done.

        Args:
            timeout: Per-agent wait limit (seconds), None to wait indefinitely

        Returns:
            Reports of the agents that finished, in creation order
        """
        reports = []
        for agent in self.agents:
            if not agent.wait(timeout):
                logger.warning("Agent %s did not finish within %.2fs", agent.username, timeout)
                continue
            agent.join()
            reports.append(agent.report)
        self.running = False

        failed = self.failed_agents()
        if failed:
            logger.error("%d agents failed: %s", len(failed),
                         ", ".join(agent.username for agent in failed))
        return reports

    def request_stop(self):
        """Ask current and not yet started agents to wrap up early."""
        self._stop_requested.set()
        for agent in self.get_agents():
            agent.stop()

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested.is_set()

    def stop_all(self, timeout: Optional[float] = None):
        """Ask every agent to stop and wait for them."""
        if not self.agents:
            return
        logger.info("Stopping all agents...")
        for agent in self.agents:
            agent.stop()
        for agent in self.agents:
            agent.join(timeout)
        self.running = False
        logger.info("All agents stopped")

    def failed_agents(self) -> List[TradingAgent]:
        return [agent for agent in self.agents if agent.error is not None]

    def get_agents(self) -> List[TradingAgent]:
        """
        Get all agent instances.

        Returns:
            Copy of agents list
        """
        return self.agents.copy()

    def get_agent_by_name(self, username: str) -> Optional[TradingAgent]:
        """
        Get agent by username.

        Args:
            username: Agent username

        Returns:
            Agent instance or None if not found
        """
        for agent in self.agents:
            if agent.username == username:
                return agent
        return None
