import logging
import threading
from typing import Callable, Optional

from sharkmon.domain.metrics import SmoothedReading

logger = logging.getLogger(__name__)


class ReadingGateway:
    """
    Owns the single SmoothedReading of the process.

    The acquisition loop mutates it through `apply` (or the `update`/`reset` shortcuts),
    readers get copies from `get_snapshot`. A threading lock guards every access so that
    readers running in worker threads and in the event loop both see whole triples.
    Nothing inside the lock awaits or does I/O.
    """

    def __init__(self, reading: Optional[SmoothedReading] = None):
        self._reading = reading if reading is not None else SmoothedReading()
        self._lock = threading.Lock()

    def get_snapshot(self) -> SmoothedReading:
        with self._lock:
            return self._reading.model_copy()

    def apply(self, mutator: Callable[[SmoothedReading], None]) -> None:
        with self._lock:
            mutator(self._reading)

    def update(self, watts: float, volts: float, frequency_hz: float) -> None:
        self.apply(lambda reading: reading.update(watts, volts, frequency_hz))

    def reset(self) -> None:
        logger.debug("Resetting reading to neutral values")
        self.apply(SmoothedReading.reset)
