"""Trading agent that buys and sells against its own ledger."""

import logging
import threading
from enum import Enum
from typing import Optional

from ..exceptions import InsufficientFunds, InsufficientPosition
from ..models.ledger import Ledger
from ..models.trade import Trade
from ..reporting import AgentReport, format_report, format_trade
from ..services.instrument_registry import InstrumentRegistry
from ..services.ledger_registry import LedgerRegistry
from .strategies.base_strategy import BaseStrategy, MarketContext, TradingDecision
from .strategies.random_strategy import RandomStrategy


class AgentState(Enum):
    INIT = "init"
    TRADING = "trading"
    REPORTING = "reporting"
    DONE = "done"


class TradingAgent:
    """
    Runs a bounded buy/sell loop for one username on its own thread.

    The agent moves INIT -> TRADING -> REPORTING -> DONE:
    - INIT fetches (or creates) the ledger from the ledger registry
    - TRADING runs ``actions`` iterations, each deciding on a trade from an
      instrument snapshot and applying it to the ledger
    - REPORTING snapshots the ledger into an AgentReport
    - DONE sets the completion event the runner waits on

    Trades rejected by the ledger for lack of cash or position are skipped.
    """

    def __init__(self, username: str, instruments: InstrumentRegistry,
                 ledgers: LedgerRegistry, actions: int = 5,
                 trade_interval: float = 1.0,
                 strategy: Optional[BaseStrategy] = None):
        """
        Initialize trading agent.

        Args:
            username: Owner of the ledger this agent trades
            instruments: Frozen instrument registry to read prices from
            ledgers: Registry holding the agent's ledger
            actions: Number of trading iterations
            trade_interval: Pause after each iteration (seconds)
            strategy: Decision policy, RandomStrategy by default
        """
        if actions < 0:
            raise ValueError("Actions must be non-negative")
        if trade_interval < 0:
            raise ValueError("Trade interval must be non-negative")
        self.username = username
        self.instruments = instruments
        self.ledgers = ledgers
        self.actions = actions
        self.trade_interval = trade_interval
        self.strategy = strategy or RandomStrategy()

        self.state = AgentState.INIT
        self.ledger: Optional[Ledger] = None
        self.iterations = 0
        self.skipped = 0
        self.report: Optional[AgentReport] = None
        self.error: Optional[BaseException] = None

        self._stop_event = threading.Event()
        self._done_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.logger = logging.getLogger(f"agent.{self.username}")

    def start(self):
        """Run the agent on its own thread."""
        if self._thread is not None:
            self.logger.warning("Agent already started")
            return
        self._thread = threading.Thread(
            target=self.run, name=f"agent-{self.username}", daemon=True
        )
        self._thread.start()

    def run(self) -> AgentReport:
        """Run the state machine to completion on the calling thread."""
        try:
            self.ledger = self.ledgers.get_or_create(self.username)
            self.state = AgentState.TRADING
            while self.iterations < self.actions and not self._stop_event.is_set():
                self.trade_once()
                self.iterations += 1
                # Pacing delay; also where a stop request cuts the loop short.
                if self._stop_event.wait(self.trade_interval):
                    self.logger.info("Stop requested after %d iterations", self.iterations)
                    break
        except Exception as e:
            self.error = e
            self.logger.exception("Trading failed: %s", e)
        finally:
            self.state = AgentState.REPORTING
            self.report = self._build_report()
            for line in format_report(self.report):
                self.logger.info("%s", line)
            self.state = AgentState.DONE
            self._done_event.set()
        return self.report

    def trade_once(self) -> Optional[Trade]:
        """Decide on and apply one trade. Returns the trade, or None if skipped."""
        context = MarketContext(
            username=self.username,
            symbols=self.instruments.symbols(),
            snapshot=lambda symbol: self.instruments.get(symbol).snapshot(),
            cash=self.ledger.cash,
            iteration=self.iterations,
        )
        decision = self.strategy.decide(context)
        if decision is None:
            self.skipped += 1
            return None
        return self._execute(decision)

    def _execute(self, decision: TradingDecision) -> Optional[Trade]:
        try:
            if decision.action == "buy":
                trade = self.ledger.buy(decision.symbol, decision.price, decision.quantity)
            elif decision.action == "sell":
                trade = self.ledger.sell(decision.symbol, decision.price, decision.quantity)
            else:
                raise ValueError(f"Unknown trading action: {decision.action}")
        except (InsufficientFunds, InsufficientPosition) as e:
            self.skipped += 1
            self.logger.debug("Skipped %s: %s", decision.action, e)
            return None
        self.logger.info("%s", format_trade(trade))
        return trade

    def _build_report(self) -> AgentReport:
        error = str(self.error) if self.error else None
        if self.ledger is None:
            return AgentReport(
                username=self.username,
                cash=0.0,
                starting_cash=0.0,
                skipped=self.skipped,
                error=error,
            )
        return AgentReport.from_snapshot(self.ledger.snapshot(), skipped=self.skipped, error=error)

    def stop(self):
        """Ask the agent to stop after its current iteration."""
        self._stop_event.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the agent reaches DONE. Returns False on timeout."""
        return self._done_event.wait(timeout)

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def done(self) -> bool:
        return self._done_event.is_set()
