"""Trading agents and the runner that drives them."""

from .trading_agent import AgentState, TradingAgent
from .agent_runner import AgentRunner

__all__ = [
    'AgentState',
    'TradingAgent',
    'AgentRunner',
]
