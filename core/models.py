"""
Topology Document Model
=======================
In-memory shape of the TopoJSON file behind the place map.

    {
      "type": "Topology",
      "arcs": [...],
      "transform": {"scale": [sx, sy], "translate": [tx, ty]},
      "objects": {
        "places":   {"type": "GeometryCollection", "geometries": [Point, ...]},
        "counties": {...},    # opaque, written back untouched
        ...
      }
    }

Every collection under 'objects' is either a PlaceCollection (the one the
store edits) or an OpaqueCollection (kept as parsed JSON and never looked
into). Documents are immutable snapshots: edits produce a new document via
with_places(), so a reader holding the old one never sees a half-applied change.
"""

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from core.errors import DataFormatError

PLACES_KEY = "places"
COLLECTION_TYPE = "GeometryCollection"
POINT_TYPE = "Point"


@dataclass(frozen=True)
class PlaceProperties:
    name: Optional[str]
    name_en: Optional[str]
    state: Optional[str]
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping) -> "PlaceProperties":
        extra = {k: v for k, v in data.items() if k not in ("name", "nameEN", "state")}
        return cls(
            name=data.get("name"),
            name_en=data.get("nameEN"),
            state=data.get("state"),
            extra=extra,
        )

    def to_dict(self) -> dict:
        data = {"name": self.name, "nameEN": self.name_en, "state": self.state}
        data.update(self.extra)
        return data


@dataclass(frozen=True)
class PlaceGeometry:
    """
    A single Point in the 'places' collection. Coordinates are grid units.

    A place parsed from JSON keeps that JSON in `raw` and serializes back to
    it exactly, so entries are written out with the keys they came in with.
    """

    id: str
    coordinates: Tuple[Any, Any]
    properties: PlaceProperties
    type: str = POINT_TYPE
    extra: Dict[str, Any] = field(default_factory=dict)
    raw: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> "PlaceGeometry":
        if not isinstance(data, Mapping):
            raise DataFormatError("Entries of 'places' must be objects")
        coordinates = data.get("coordinates")
        if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
            raise DataFormatError(
                f"Place {data.get('id')!r} must have exactly two coordinates"
            )
        properties = data.get("properties")
        extra = {
            k: v for k, v in data.items()
            if k not in ("type", "coordinates", "properties", "id")
        }
        return cls(
            id=data.get("id"),
            coordinates=(coordinates[0], coordinates[1]),
            properties=PlaceProperties.from_dict(properties if isinstance(properties, Mapping) else {}),
            type=data.get("type", POINT_TYPE),
            extra=extra,
            raw=copy.deepcopy(dict(data)),
        )

    def to_dict(self) -> dict:
        if self.raw is not None:
            return copy.deepcopy(self.raw)
        data = {
            "type": self.type,
            "coordinates": list(self.coordinates),
            "properties": self.properties.to_dict(),
            "id": self.id,
        }
        data.update(self.extra)
        return data


@dataclass(frozen=True)
class PlaceCollection:
    geometries: Tuple[PlaceGeometry, ...]
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping) -> "PlaceCollection":
        geometries = data.get("geometries")
        if not isinstance(geometries, list):
            raise DataFormatError("'places' geometries must be an array")
        extra = {k: v for k, v in data.items() if k not in ("type", "geometries")}
        return cls(tuple(PlaceGeometry.from_dict(g) for g in geometries), extra)

    def ids(self) -> set:
        return {g.id for g in self.geometries}

    def to_dict(self) -> dict:
        data = {
            "type": COLLECTION_TYPE,
            "geometries": [g.to_dict() for g in self.geometries],
        }
        data.update(self.extra)
        return data


@dataclass(frozen=True)
class OpaqueCollection:
    """Any collection other than 'places'. Round-tripped as-is."""

    raw: Any

    def to_dict(self) -> Any:
        return self.raw


Collection = Union[PlaceCollection, OpaqueCollection]


@dataclass(frozen=True)
class TopologyDocument:
    # top-level members in file order; 'objects' is rebuilt from `objects`
    members: Dict[str, Any]
    objects: Dict[str, Collection]

    @classmethod
    def from_dict(cls, data: Any) -> "TopologyDocument":
        if not isinstance(data, Mapping):
            raise DataFormatError("TopoJSON root must be an object")
        objects = data.get("objects")
        places = objects.get(PLACES_KEY) if isinstance(objects, Mapping) else None
        if not isinstance(places, Mapping) or places.get("type") != COLLECTION_TYPE:
            raise DataFormatError("'places' GeometryCollection not found in TopoJSON")

        parsed: Dict[str, Collection] = {}
        for name, value in objects.items():
            if name == PLACES_KEY:
                parsed[name] = PlaceCollection.from_dict(value)
            else:
                parsed[name] = OpaqueCollection(value)
        return cls(members=dict(data), objects=parsed)

    @property
    def places(self) -> PlaceCollection:
        return self.objects[PLACES_KEY]

    @property
    def transform(self) -> Optional[Mapping]:
        return self.members.get("transform")

    def with_places(self, geometries) -> "TopologyDocument":
        objects = dict(self.objects)
        objects[PLACES_KEY] = replace(self.places, geometries=tuple(geometries))
        return replace(self, objects=objects)

    def to_dict(self) -> dict:
        data = dict(self.members)
        data["objects"] = {name: c.to_dict() for name, c in self.objects.items()}
        return data
