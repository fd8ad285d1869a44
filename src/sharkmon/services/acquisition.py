import asyncio
import json
import logging
import time
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple

from sharkmon.domain.exceptions import ConnectError, TransportError
from sharkmon.domain.metrics import RawSample, SmoothedReading
from sharkmon.domain.registers import (
    FLOAT32_WORDS,
    REG_FREQUENCY,
    REG_VOLTS,
    REG_WATTS,
    Endpoint,
    decode_f32,
)
from sharkmon.ports.transport import MeterConnector, RegisterTransport
from sharkmon.services.gateway import ReadingGateway

logger = logging.getLogger(__name__)

POLL_INTERVAL = 1.0
RECONNECT_DELAY = 2.0


class AcquisitionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    POLLING = "polling"


def render_snapshot(reading: SmoothedReading) -> str:
    return json.dumps({"watts": reading.watts, "volts": reading.volts, "frequency": reading.frequency_hz})


def print_snapshot(reading: SmoothedReading) -> None:
    print(render_snapshot(reading), flush=True)


class AcquisitionService:
    """
    Polls the meter and feeds the gateway.

    DISCONNECTED -> CONNECTING -> POLLING, and back to DISCONNECTED on any connect or read
    failure: the reading is reset, the session dropped, and after RECONNECT_DELAY the loop
    connects again. There is no retry limit. `run` only returns once `stop` is set.
    """

    def __init__(
        self,
        connector: MeterConnector,
        gateway: ReadingGateway,
        endpoint: Endpoint,
        verbose: bool = False,
        snapshot_sink: Optional[Callable[[SmoothedReading], None]] = None,
        poll_interval: float = POLL_INTERVAL,
        reconnect_delay: float = RECONNECT_DELAY,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.connector = connector
        self.gateway = gateway
        self.endpoint = endpoint
        self.verbose = verbose
        self.snapshot_sink = snapshot_sink or print_snapshot
        self.poll_interval = poll_interval
        self.reconnect_delay = reconnect_delay
        self._clock = clock
        self._sleep_fn = sleep

        self.state = AcquisitionState.DISCONNECTED
        self.fault_count = 0

    async def read_sample(self, transport: RegisterTransport) -> RawSample:
        # Fixed order: power, voltage, frequency
        watts = await self._read_f32(transport, REG_WATTS)
        volts = await self._read_f32(transport, REG_VOLTS)
        frequency_hz = await self._read_f32(transport, REG_FREQUENCY)
        return RawSample(watts, volts, frequency_hz)

    async def poll_once(self, transport: RegisterTransport) -> SmoothedReading:
        sample = await self.read_sample(transport)
        logger.debug(f"Raw sample: {sample.watts}W {sample.volts}V {sample.frequency_hz}Hz")
        self.gateway.update(*sample)

        snapshot = self.gateway.get_snapshot()
        if self.verbose:
            self.snapshot_sink(snapshot)
        return snapshot

    async def run(self, stop: Optional[asyncio.Event] = None) -> None:
        if stop is None:
            stop = asyncio.Event()

        logger.info(f"Starting acquisition loop for meter {self.endpoint} (Interval: {self.poll_interval}s)")
        try:
            while not stop.is_set():
                try:
                    await self._connect_and_poll(stop)
                except (ConnectError, TransportError) as e:
                    logger.error(f"Connection error: {e}. Sleeping {self.reconnect_delay}s and retrying")
                except Exception as e:
                    logger.exception(f"Unexpected error in acquisition loop: {e}. Sleeping {self.reconnect_delay}s and retrying")
                else:
                    continue

                self.fault_count += 1
                self.state = AcquisitionState.DISCONNECTED
                self.gateway.reset()
                await self._sleep(self.reconnect_delay, stop)
        finally:
            self.state = AcquisitionState.DISCONNECTED
            logger.info("Acquisition loop stopped")

    async def _connect_and_poll(self, stop: asyncio.Event) -> None:
        self.state = AcquisitionState.CONNECTING
        logger.info(f"Connecting to meter at {self.endpoint}")
        transport = await self.connector.connect(self.endpoint)

        try:
            self.state = AcquisitionState.POLLING
            logger.info(f"Connected to meter at {self.endpoint}")

            start = self._clock()
            tick = 0
            while not stop.is_set():
                await self.poll_once(transport)
                tick, delay = self._next_tick(start, tick)
                await self._sleep(delay, stop)
        finally:
            await transport.close()

    def _next_tick(self, start: float, tick: int) -> Tuple[int, float]:
        """
        Ticks sit on start + n * poll_interval. Returns the next tick index and the
        time left until it. An overrunning cycle skips the ticks it missed.
        """
        now = self._clock()
        tick += 1
        target = start + tick * self.poll_interval
        if target < now:
            next_tick = int((now - start) // self.poll_interval) + 1
            logger.warning(f"Poll cycle overran by {now - target:.3f}s, skipping {next_tick - tick} tick(s)")
            tick = next_tick
            target = start + tick * self.poll_interval
        return tick, target - now

    async def _sleep(self, delay: float, stop: asyncio.Event) -> None:
        if delay <= 0:
            return
        if self._sleep_fn is not None:
            await self._sleep_fn(delay)
            return
        try:
            await asyncio.wait_for(stop.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def _read_f32(self, transport: RegisterTransport, address: int) -> float:
        words = await transport.read_registers(address, FLOAT32_WORDS)
        if len(words) != FLOAT32_WORDS:
            raise TransportError(f"Expected {FLOAT32_WORDS} registers at 0x{address:04X}, got {len(words)}")
        return decode_f32(words)
