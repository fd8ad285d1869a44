from typing import NamedTuple

from pydantic import BaseModel

from sharkmon.domain.registers import to_f32

# Weight kept from history on every update (80% history, 20% new sample)
EWMA_ALPHA = 0.8


def ewma(previous: float, sample: float, alpha: float = EWMA_ALPHA) -> float:
    return to_f32(previous * alpha + sample * (1.0 - alpha))


class RawSample(NamedTuple):
    watts: float
    volts: float
    frequency_hz: float


class SmoothedReading(BaseModel):
    # False until the first successful sample. Channel values mean nothing before that.
    initialized: bool = False
    watts: float = 0.0
    volts: float = 0.0
    frequency_hz: float = 0.0

    def update(self, watts: float, volts: float, frequency_hz: float) -> None:
        """
        Fold a new sample into the reading.
        The first sample seeds the channels as-is, later ones are smoothed with EWMA_ALPHA.
        """
        if not self.initialized:
            self.watts = to_f32(watts)
            self.volts = to_f32(volts)
            self.frequency_hz = to_f32(frequency_hz)
            self.initialized = True
        else:
            self.watts = ewma(self.watts, watts)
            self.volts = ewma(self.volts, volts)
            self.frequency_hz = ewma(self.frequency_hz, frequency_hz)

    def reset(self) -> None:
        # `initialized` stays as it is: after a fault a reader sees zeros with the flag still set.
        self.watts = 0.0
        self.volts = 0.0
        self.frequency_hz = 0.0
