from typing import List, Protocol

from sharkmon.domain.registers import Endpoint


class RegisterTransport(Protocol):
    async def read_registers(self, address: int, count: int) -> List[int]:
        """
        Read `count` 16-bit registers starting at `address` from the connected meter.
        Raises TransportError, after which the session must not be used again.
        """
        ...

    async def close(self) -> None:
        ...


class MeterConnector(Protocol):
    async def connect(self, endpoint: Endpoint) -> RegisterTransport:
        """
        Open a session to the meter at `endpoint`, addressed to the fixed unit id.
        Raises ConnectError if the meter cannot be reached.
        """
        ...
