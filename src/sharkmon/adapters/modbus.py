import logging
from typing import List

from pymodbus.client import AsyncModbusTcpClient
from pymodbus.exceptions import ModbusException

from sharkmon.domain.exceptions import ConnectError, TransportError
from sharkmon.domain.registers import UNIT_ID, Endpoint

logger = logging.getLogger(__name__)


class ModbusTransport:
    """One Modbus/TCP session. Any failure leaves it unusable, the caller reconnects."""

    def __init__(self, client: AsyncModbusTcpClient, endpoint: Endpoint, unit_id: int = UNIT_ID):
        self._client = client
        self.endpoint = endpoint
        self.unit_id = unit_id

    async def read_registers(self, address: int, count: int) -> List[int]:
        if not self._client.connected:
            raise TransportError(f"Connection to {self.endpoint} is closed")

        try:
            response = await self._client.read_holding_registers(address, count=count, device_id=self.unit_id)
        except ModbusException as e:
            raise TransportError(f"Reading 0x{address:04X} from {self.endpoint} failed: {e}") from e
        except OSError as e:
            raise TransportError(f"Connection to {self.endpoint} lost: {e}") from e

        if response is None or response.isError():
            raise TransportError(f"Meter returned an error for 0x{address:04X}: {response}")

        registers = list(response.registers)
        if len(registers) != count:
            raise TransportError(f"Expected {count} registers at 0x{address:04X}, got {len(registers)}")
        return registers

    async def close(self) -> None:
        if self._client.connected:
            logger.debug(f"Closing Modbus connection to {self.endpoint}")
        self._client.close()


class ModbusConnector:
    def __init__(self, timeout: float = 3.0, unit_id: int = UNIT_ID):
        self.timeout = timeout
        self.unit_id = unit_id

    async def connect(self, endpoint: Endpoint) -> ModbusTransport:
        # pymodbus' own retries and reconnect are disabled, the acquisition loop owns both
        client = AsyncModbusTcpClient(
            endpoint.host,
            port=endpoint.port,
            timeout=self.timeout,
            retries=0,
            reconnect_delay=0,
        )
        try:
            connected = await client.connect()
        except (ModbusException, OSError) as e:
            client.close()
            raise ConnectError(f"Could not connect to meter at {endpoint}: {e}") from e

        if not connected:
            client.close()
            raise ConnectError(f"Could not connect to meter at {endpoint}")

        logger.debug(f"Modbus session open to {endpoint}, unit id {self.unit_id}")
        return ModbusTransport(client, endpoint, unit_id=self.unit_id)
