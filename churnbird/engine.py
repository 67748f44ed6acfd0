"""Turnover engine: periodic series churn."""
import threading
import time
import logging

from churnbird.config import TurnoverConfig
from churnbird.population import Population

logger = logging.getLogger(__name__)


class TurnoverEngine:
    """Background loop that replaces part of every family on a timer."""

    def __init__(self, population: Population, config: TurnoverConfig):
        self.population = population
        self.config = config
        self.running = False
        self.cycle_count = 0
        self.last_replaced = 0
        self.start_time = time.time()
        self._stopped = threading.Event()

    def cycle(self) -> int:
        """Run one turnover cycle under the population lock."""
        with self.population.locked():
            start = time.time()
            replaced = self.population.turnover_cycle(self.config.rate)
            self.cycle_count += 1
            self.last_replaced = replaced

        logger.info(
            f"Replaced {replaced} old series with new ones "
            f"in {time.time() - start:.3f}s"
        )
        return replaced

    def run(self):
        """Run the turnover loop until stopped."""
        if not self.config.enabled:
            logger.info("Series turnover disabled (rate 0)")
            return

        self.running = True
        self.start_time = time.time()

        logger.info(
            f"Starting turnover engine: rate 1/{self.config.rate}, "
            f"interval {self.config.interval_s}s"
        )

        try:
            while not self._stopped.wait(self.config.interval_s):
                self.cycle()
        finally:
            self.running = False

    def stop(self):
        """Stop the turnover loop."""
        logger.info("Stopping turnover engine")
        self.running = False
        self._stopped.set()


def run_engine_thread(engine: TurnoverEngine):
    """Run engine in a separate thread."""
    try:
        engine.run()
    except Exception as e:
        logger.error(f"Engine thread error: {e}", exc_info=True)
        engine.stop()
