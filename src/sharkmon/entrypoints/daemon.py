import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

import uvicorn

from sharkmon.adapters.modbus import ModbusConnector
from sharkmon.config import settings
from sharkmon.domain.exceptions import ConfigError
from sharkmon.domain.registers import parse_endpoint
from sharkmon.entrypoints.api.main import create_app
from sharkmon.ports.transport import MeterConnector
from sharkmon.services.acquisition import AcquisitionService
from sharkmon.services.gateway import ReadingGateway

# Setup logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# The simulated meter ignores the address, so mock mode runs without METER
MOCK_METER = "localhost:502"


def setup_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sharkmon", description="Shark 100S power meter web gateway")
    parser.add_argument(
        "meter",
        nargs="?",
        default=settings.METER,
        help="IP address/hostname and port of meter, e.g., 192.168.1.100:502",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print every smoothed reading to stdout")
    parser.add_argument(
        "-n",
        "--no-web",
        dest="no_web",
        action="store_true",
        help="Disable built in web server (implies verbose)",
    )
    return parser


def build_connector(mode: str) -> MeterConnector:
    if mode == "production":
        return ModbusConnector(timeout=settings.MODBUS_TIMEOUT)

    logger.info("Running in MOCK mode. Using a simulated meter.")
    from sharkmon.adapters.mocks import MockMeterConnector

    return MockMeterConnector()


async def main(argv: Optional[Sequence[str]] = None) -> None:
    args = setup_parser().parse_args(argv)
    no_web = args.no_web or settings.NO_WEB
    verbose = args.verbose or settings.VERBOSE or no_web

    logger.info(f"Starting Sharkmon (Mode: {settings.COLLECTOR_MODE})")

    meter = args.meter
    if not meter and settings.COLLECTOR_MODE == "mock":
        meter = MOCK_METER

    # A malformed endpoint can never succeed, so it is not retried
    try:
        endpoint = parse_endpoint(meter)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    gateway = ReadingGateway()
    acquisition = AcquisitionService(
        connector=build_connector(settings.COLLECTOR_MODE),
        gateway=gateway,
        endpoint=endpoint,
        verbose=verbose,
    )

    try:
        if no_web:
            await acquisition.run()
        else:
            app = create_app(gateway, acquisition=acquisition, index_html=settings.INDEX_HTML)
            config = uvicorn.Config(
                app,
                host=settings.HTTP_HOST,
                port=settings.HTTP_PORT,
                log_level=settings.LOG_LEVEL.lower(),
            )
            logger.info(f"Serving on http://{settings.HTTP_HOST}:{settings.HTTP_PORT}")
            await uvicorn.Server(config).serve()
    except asyncio.CancelledError:
        logger.info("Daemon stopping...")


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
