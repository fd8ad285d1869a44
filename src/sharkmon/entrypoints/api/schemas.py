from pydantic import BaseModel

from sharkmon.domain.metrics import SmoothedReading


class PowerResponse(BaseModel):
    watts: float
    volts: float
    frequency: float

    @classmethod
    def from_reading(cls, reading: SmoothedReading) -> "PowerResponse":
        # `initialized` is internal and never leaves the process
        return cls(watts=reading.watts, volts=reading.volts, frequency=reading.frequency_hz)


class HealthResponse(BaseModel):
    status: str
