import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import FileResponse

from sharkmon.config import settings
from sharkmon.entrypoints.api import dependencies, schemas
from sharkmon.services.acquisition import AcquisitionService
from sharkmon.services.gateway import ReadingGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: the acquisition loop runs beside the server for its whole lifetime
    acquisition: Optional[AcquisitionService] = app.state.acquisition
    stop = asyncio.Event()
    task = None
    if acquisition is not None:
        task = asyncio.create_task(acquisition.run(stop), name="acquisition")

    yield

    # Shutdown
    if task is not None:
        logger.info("Stopping acquisition loop...")
        stop.set()
        await task


def create_app(
    gateway: ReadingGateway,
    acquisition: Optional[AcquisitionService] = None,
    index_html: Optional[str] = None,
) -> FastAPI:
    app = FastAPI(title="Sharkmon", lifespan=lifespan)
    app.state.gateway = gateway
    app.state.acquisition = acquisition
    app.state.index_html = index_html if index_html is not None else settings.INDEX_HTML

    @app.get("/health", response_model=schemas.HealthResponse)
    async def health_check():
        return {"status": "ok"}

    @app.get("/power", response_model=schemas.PowerResponse)
    async def get_power(
        gateway: Annotated[ReadingGateway, Depends(dependencies.get_gateway)],
    ):
        return schemas.PowerResponse.from_reading(gateway.get_snapshot())

    @app.get("/", include_in_schema=False)
    async def index(
        index_path: Annotated[Path, Depends(dependencies.get_index_path)],
    ):
        if not index_path.is_file():
            raise HTTPException(status_code=404, detail=f"{index_path} not found")
        return FileResponse(index_path, media_type="text/html")

    return app
