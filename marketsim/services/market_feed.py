"""Background price/volume feeds, one per instrument."""

import logging
import random
import threading
from typing import Dict, Iterable, List, Optional

from ..models.instrument import Instrument

logger = logging.getLogger(__name__)


def next_price(current: float, rng: random.Random) -> float:
    """Move price uniformly within +-2% of its current value."""
    return current + (rng.random() - 0.5) * 0.04 * current


def next_volume(current: int, rng: random.Random) -> int:
    """Redraw volume uniformly from [0, current // 10]."""
    return current + rng.randrange(current // 10 + 1) - current


class MarketFeed:
    """Perturbs one instrument's price and volume on a fixed period.

    The feed runs on its own daemon thread until ``stop`` is called. The stop
    event doubles as the period timer so a stop request ends the loop as soon
    as any in-flight update has released the instrument lock.
    """

    def __init__(self, instrument: Instrument, interval: float = 1.0,
                 rng: Optional[random.Random] = None):
        if interval <= 0:
            raise ValueError("Feed interval must be positive")
        self.instrument = instrument
        self.interval = interval
        self.rng = rng or random.Random()
        self.ticks = 0
        self.error: Optional[BaseException] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def symbol(self) -> str:
        return self.instrument.symbol

    def tick(self):
        """Apply one price/volume update and log it."""
        price, volume = self.instrument.update(
            lambda p: next_price(p, self.rng),
            lambda v: next_volume(v, self.rng),
        )
        self.ticks += 1
        logger.info("Instrument %s - Price: %.2f, Volume: %d", self.symbol, price, volume)
        return price, volume

    def start(self):
        if self._thread is not None:
            logger.debug("Feed already running for %s", self.symbol)
            return
        self._thread = threading.Thread(
            target=self._run, name=f"feed-{self.symbol}", daemon=True
        )
        self._thread.start()

    def _run(self):
        try:
            while not self._stop_event.wait(self.interval):
                self.tick()
        except Exception as e:
            self.error = e
            logger.exception("Feed for %s stopped on error: %s", self.symbol, e)

    def stop(self):
        """Signal the feed loop to exit."""
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the feed thread to exit. Returns True once it has."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()


class FeedManager:
    """Maintains one running feed per instrument."""

    def __init__(self, interval: float = 1.0, rng: Optional[random.Random] = None):
        if interval <= 0:
            raise ValueError("Feed interval must be positive")
        self.interval = interval
        self.rng = rng or random.Random()
        self._feeds: Dict[str, MarketFeed] = {}
        self._lock = threading.Lock()

    def bootstrap(self, instruments: Iterable[Instrument], start: bool = True):
        """Ensure every instrument has a feed, started unless ``start`` is False."""
        for instrument in instruments:
            self.ensure_instrument(instrument, start=start)

    def ensure_instrument(self, instrument: Instrument, start: bool = True) -> MarketFeed:
        """Create a feed for an instrument if it has none.

        The feed is started unless ``start`` is False. A feed registered
        earlier without being started is started by a later call; a stopped
        feed is left alone.
        """
        with self._lock:
            feed = self._feeds.get(instrument.symbol)
            if feed is None:
                # Each feed draws from its own generator, seeded from the manager's.
                feed = MarketFeed(
                    instrument,
                    interval=self.interval,
                    rng=random.Random(self.rng.getrandbits(64)),
                )
                self._feeds[instrument.symbol] = feed
            elif feed.running or feed.stopped:
                logger.debug("Feed already registered for instrument %s", instrument.symbol)
                return feed
            if start:
                logger.info("Starting feed for instrument %s (interval: %.2fs)",
                            instrument.symbol, self.interval)
                feed.start()
        return feed

    def remove_instrument(self, symbol: str, timeout: Optional[float] = None) -> bool:
        """Stop and forget the feed for an instrument."""
        with self._lock:
            feed = self._feeds.pop(symbol, None)
        if feed is None:
            return False
        feed.stop()
        return feed.join(timeout)

    def tick_all(self):
        """Run one synchronous update on every managed instrument."""
        for feed in self.feeds():
            feed.tick()

    def stop_all(self, timeout: Optional[float] = None) -> List[str]:
        """Stop every feed and wait for it.

        Returns:
            Symbols whose feed thread did not exit within ``timeout``
        """
        feeds = self.feeds()
        for feed in feeds:
            feed.stop()
        stuck = [feed.symbol for feed in feeds if not feed.join(timeout)]
        if stuck:
            logger.warning("Feeds still running after stop: %s", ", ".join(stuck))
        else:
            logger.info("Stopped %d feeds", len(feeds))
        return stuck

    def feeds(self) -> List[MarketFeed]:
        with self._lock:
            return list(self._feeds.values())

    def get_feed(self, symbol: str) -> Optional[MarketFeed]:
        with self._lock:
            return self._feeds.get(symbol)
