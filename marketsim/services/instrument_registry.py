"""Registry of tradable instruments."""

import logging
from typing import Dict, Iterable, List

from ..exceptions import RegistryFrozen, UnknownInstrument
from ..models.instrument import Instrument

logger = logging.getLogger(__name__)


class InstrumentRegistry:
    """Maps symbols to instruments.

    The registry is populated before any feed or agent starts and then
    frozen. After ``freeze`` the mapping never changes, so lookups take no
    lock; each instrument still guards its own price and volume.
    """

    def __init__(self, instruments: Iterable[Instrument] = ()):
        self._instruments: Dict[str, Instrument] = {}
        self._frozen = False
        for instrument in instruments:
            self.add(instrument)

    @classmethod
    def from_seeds(cls, seeds: Iterable[dict]) -> 'InstrumentRegistry':
        """Build and freeze a registry from seed dictionaries."""
        registry = cls(Instrument.from_dict(seed) for seed in seeds)
        registry.freeze()
        return registry

    def add(self, instrument: Instrument) -> Instrument:
        """Add an instrument. Only allowed before the registry is frozen."""
        if self._frozen:
            raise RegistryFrozen(f"Cannot add {instrument.symbol}: registry is frozen")
        if instrument.symbol in self._instruments:
            raise ValueError(f"Duplicate instrument symbol: {instrument.symbol}")
        self._instruments[instrument.symbol] = instrument
        logger.debug("Registered instrument %s", instrument.symbol)
        return instrument

    def freeze(self):
        if not self._instruments:
            raise ValueError("Instrument registry needs at least one instrument")
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, symbol: str) -> Instrument:
        """Get instrument by symbol."""
        try:
            return self._instruments[symbol]
        except KeyError:
            raise UnknownInstrument(symbol) from None

    def has_instrument(self, symbol: str) -> bool:
        return symbol in self._instruments

    def symbols(self) -> List[str]:
        return list(self._instruments)

    def list_instruments(self) -> List[Instrument]:
        return list(self._instruments.values())

    def current_prices(self) -> Dict[str, float]:
        """Snapshot price of every instrument, one instrument at a time."""
        return {symbol: inst.snapshot()[0] for symbol, inst in self._instruments.items()}

    def __len__(self) -> int:
        return len(self._instruments)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._instruments
