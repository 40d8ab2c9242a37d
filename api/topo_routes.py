"""
Topology API Routes
===================
Places on the map, backed by the TopologyStore on app.state.

Endpoints:
  GET  /api/topo/places          - list places
  POST /api/topo/places          - add a place (validated, unique id)
  POST /api/topo/places/remove   - remove places by id  {"ids": [...]}
  GET  /api/topo/transform       - grid transform of the document
  GET  /api/topo/convert         - lon/lat <-> grid  (?lon=&lat= or ?x=&y=)

Every response uses the same envelope:
  {"success": true,  "data": [...]}
  {"success": false, "message": "...", "error": "..."}
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StrictStr, ValidationError

from core.errors import MapDataError, PlaceConflictError, PlaceValidationError
from core.topo_store import TopologyStore
from core.validator import ensure_valid_place

router = APIRouter(prefix="/api/topo", tags=["topo"])


def _store(request: Request) -> TopologyStore:
    return request.app.state.topo_store


def success(data: list, status_code: int = 200) -> JSONResponse:
    return JSONResponse({"success": True, "data": data}, status_code=status_code)


def failure(message: str, error: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        {"success": False, "message": message, "error": error},
        status_code=status_code,
    )


@router.get("/places")
def get_places(request: Request):
    """List every place in file order."""
    try:
        places = _store(request).get_places()
    except MapDataError as e:
        return failure("Failed to read Json file", str(e), 500)
    return success([p.to_dict() for p in places])


@router.post("/places")
def add_place(request: Request, body: Any = Body(None)):
    """
    Add a place.

    Body:
        {
            "type": "Point",
            "coordinates": [x, y],
            "id": "unique-id",
            "properties": {"name": "...", "nameEN": "..." | null, "state": "..."}
        }
    """
    try:
        ensure_valid_place(body)
        _store(request).add_place(body)
    except PlaceValidationError as e:
        return failure("Invalid PlaceGeometry object.", e.reason, 400)
    except PlaceConflictError as e:
        return failure("Conflict", str(e), 409)
    except MapDataError as e:
        return failure("Internal Server Error", str(e), 500)
    return success(["Place added successfully."])


class RemovePlacesRequest(BaseModel):
    ids: List[StrictStr]


IDS_MISSING = 'Request body must contain an array of IDs under the "ids" key.'
IDS_NOT_STRINGS = "All IDs must be strings."
IDS_EMPTY = "IDs array must be a non-empty array of strings"


def _ids_error(error: ValidationError) -> str:
    # errors located under ids[n] are bad items; anything else is a bad container
    if any(len(e["loc"]) > 1 for e in error.errors()):
        return IDS_NOT_STRINGS
    return IDS_MISSING


@router.post("/places/remove")
def remove_places(request: Request, body: Any = Body(None)):
    """Remove places whose id is listed under "ids"."""
    try:
        payload = RemovePlacesRequest.model_validate(body)
    except ValidationError as e:
        return failure("Bad Request", _ids_error(e), 400)
    if not payload.ids:
        return failure("Bad Request", IDS_EMPTY, 400)

    try:
        removed = _store(request).delete_places(payload.ids)
    except MapDataError as e:
        return failure("Internal Server Error", str(e), 500)
    return success([f"Successfully deleted {removed} places"])


@router.get("/transform")
def get_transform(request: Request):
    try:
        transform = _store(request).get_transform()
    except MapDataError as e:
        return failure("Failed to read Json file", str(e), 500)
    return success([transform.to_descriptor()])


@router.get("/convert")
def convert(
    request: Request,
    lon: Optional[float] = Query(None),
    lat: Optional[float] = Query(None),
    x: Optional[float] = Query(None),
    y: Optional[float] = Query(None),
):
    """Geographic -> grid when lon/lat are given, grid -> geographic for x/y."""
    try:
        transform = _store(request).get_transform()
    except MapDataError as e:
        return failure("Failed to read Json file", str(e), 500)

    if lon is not None and lat is not None:
        gx, gy = transform.to_grid(lon, lat)
        return success([{"x": gx, "y": gy}])
    if x is not None and y is not None:
        glon, glat = transform.to_geo(x, y)
        return success([{"lon": glon, "lat": glat}])
    return failure("Bad Request", "Provide either lon and lat, or x and y.", 400)
