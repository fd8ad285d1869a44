from pathlib import Path

from fastapi import Request

from sharkmon.services.gateway import ReadingGateway


def get_gateway(request: Request) -> ReadingGateway:
    return request.app.state.gateway


def get_index_path(request: Request) -> Path:
    return Path(request.app.state.index_html)
