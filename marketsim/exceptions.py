"""Exceptions raised by the simulator."""


class SimulationError(Exception):
    """Base class for simulator errors."""


class LedgerError(SimulationError):
    """A buy or sell could not be applied to a ledger."""


class InsufficientFunds(LedgerError):
    """Buy requested more value than the ledger's available cash."""

    def __init__(self, symbol: str, required: float, available: float):
        self.symbol = symbol
        self.required = required
        self.available = available
        super().__init__(
            f"insufficient funds to buy {symbol}: need {required:.2f}, have {available:.2f}"
        )


class InsufficientPosition(LedgerError):
    """Sell requested more volume than held, or the position is absent."""

    def __init__(self, symbol: str, requested: int, held: int):
        self.symbol = symbol
        self.requested = requested
        self.held = held
        super().__init__(
            f"insufficient position to sell {symbol}: requested {requested}, held {held}"
        )


class InvalidOrder(LedgerError, ValueError):
    """Order arguments violate buy/sell preconditions."""


class UnknownInstrument(SimulationError, KeyError):
    """Symbol is not present in the instrument registry."""

    def __str__(self) -> str:
        return f"unknown instrument: {self.args[0]}" if self.args else "unknown instrument"


class RegistryFrozen(SimulationError):
    """Instrument registry no longer accepts additions."""
