"""
Table API Routes
================
Read-only access to the spreadsheet behind the map overlays.

Endpoints:
  GET /api/all-data            - every row
  GET /api/excel               - every row
  GET /api/excel/theatres      - theatres, ?type=city|regional|state|private
"""

from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.encoders import jsonable_encoder

from api.topo_routes import failure, success
from core.errors import MapDataError
from core.table_cache import TableCache

router = APIRouter(prefix="/api", tags=["data"])

READ_FAILED = "Failed to read Excel file"


def _cache(request: Request) -> TableCache:
    return request.app.state.table_cache


@router.get("/all-data")
@router.get("/excel")
def get_all_rows(request: Request):
    try:
        rows = _cache(request).get_rows()
    except MapDataError as e:
        return failure(READ_FAILED, str(e), 500)
    return success(jsonable_encoder(rows))


@router.get("/excel/theatres")
def get_theatres(request: Request, type: Optional[str] = Query(None)):
    try:
        theatres = _cache(request).get_theatres(type)
    except MapDataError as e:
        return failure(READ_FAILED, str(e), 500)
    return success(jsonable_encoder(theatres))
