import logging
import random
from typing import Dict, List

from sharkmon.domain.exceptions import TransportError
from sharkmon.domain.registers import REG_FREQUENCY, REG_VOLTS, REG_WATTS, Endpoint, encode_f32

logger = logging.getLogger(__name__)


class MockMeterTransport:
    def __init__(self):
        self.closed = False

    def _values(self) -> Dict[int, float]:
        return {
            REG_WATTS: random.uniform(300.0, 3500.0),
            REG_VOLTS: random.uniform(225.0, 235.0),
            REG_FREQUENCY: random.uniform(49.95, 50.05),
        }

    async def read_registers(self, address: int, count: int) -> List[int]:
        if self.closed:
            raise TransportError("Mock: session closed")

        values = self._values()
        if address not in values or count != 2:
            raise TransportError(f"Mock: illegal data address 0x{address:04X} (count {count})")

        logger.debug(f"Mock: Reading registers at 0x{address:04X}")
        return encode_f32(values[address])

    async def close(self) -> None:
        self.closed = True


class MockMeterConnector:
    async def connect(self, endpoint: Endpoint) -> MockMeterTransport:
        logger.info(f"Mock: Simulating meter at {endpoint}")
        return MockMeterTransport()
