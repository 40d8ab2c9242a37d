"""
Topology Store
==============
File-backed cache of the TopoJSON document with add/delete for places.

State:
    _document   last parsed snapshot (None until first access)
    _mtime_ns   modification time of the file when that snapshot was taken

Every public call refreshes first: stat the file, and re-read it only when
the mtime differs from the recorded one. External edits are therefore picked
up on the next call, not immediately. There is no file locking; the store
assumes it is the only writer in its process tree.

Mutations run as one read -> check -> modify -> persist sequence under a
single lock. The document is copy-on-write: a new snapshot is built, written
to disk, and only then swapped in. If anything fails, the previous snapshot
and the file are left as they were.

Usage:
    store = TopologyStore("public/germany.json")
    store.add_place({"type": "Point", "coordinates": [10, 20], "id": "x", ...})
    removed = store.delete_places({"x"})
"""

import logging
import threading
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

from core.errors import PlaceConflictError, MapDataError, DataFormatError, DataIOError
from core.models import POINT_TYPE, PlaceGeometry, TopologyDocument
from core.storage import TopologyFile
from core.transform import DEFAULT_TRANSFORM, GridTransform

log = logging.getLogger("topo_store")


class TopologyStore:
    def __init__(self, source: Union[str, Path, TopologyFile]):
        self._file = source if isinstance(source, TopologyFile) else TopologyFile(source)
        self._document: Optional[TopologyDocument] = None
        self._mtime_ns: Optional[int] = None
        # Guards refresh and every read-modify-write-persist sequence
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._file.path

    # =========================================================================
    # CACHE
    # =========================================================================

    def _refresh(self) -> TopologyDocument:
        """Return a current snapshot, re-reading the file if its mtime moved. Caller holds _lock."""
        mtime = self._file.mtime_ns()
        if self._document is not None and mtime == self._mtime_ns:
            log.debug("TopoJSON cache is fresh")
            return self._document

        document = TopologyDocument.from_dict(self._file.read())
        self._document = document
        self._mtime_ns = mtime
        log.info(
            f"TopoJSON data loaded and cached from {self.path} "
            f"({len(document.places.geometries)} places)"
        )
        return document

    def _commit(self, document: TopologyDocument) -> None:
        """Persist, then swap the cache. Caller holds _lock."""
        self._file.write(document.to_dict())
        self._document = document
        try:
            self._mtime_ns = self._file.mtime_ns()
        except DataIOError as e:
            # The write landed; with no mtime recorded the next refresh re-reads
            log.warning(f"Could not stat {self.path} after saving: {e}")
            self._mtime_ns = None

    # =========================================================================
    # READ
    # =========================================================================

    def get_places(self) -> List[PlaceGeometry]:
        """All places in file order."""
        try:
            with self._lock:
                document = self._refresh()
        except MapDataError as e:
            log.error(f"Error retrieving places list: {e}")
            raise
        places = list(document.places.geometries)
        log.debug(f"Retrieved {len(places)} places from TopoJSON data")
        return places

    def get_transform(self) -> GridTransform:
        """Grid transform declared by the document, or the default if it has none."""
        with self._lock:
            document = self._refresh()
        descriptor = document.transform
        if descriptor is None:
            return DEFAULT_TRANSFORM
        try:
            return GridTransform.from_descriptor(descriptor)
        except (KeyError, TypeError, ValueError) as e:
            raise DataFormatError(f"Invalid 'transform' in TopoJSON: {e}") from e

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add_place(self, candidate: Union[Mapping, PlaceGeometry]) -> PlaceGeometry:
        """
        Append a place and persist the whole document.

        The candidate is expected to have passed validate_place() already; only
        the structural minimum (Point with two coordinates) is re-checked here.

        Raises:
            DataFormatError: candidate is not a Point with two coordinates
            PlaceConflictError: a place with the same id exists (nothing written)
            DataIOError: file unreadable/unwritable
        """
        try:
            place = _coerce_place(candidate)
            with self._lock:
                document = self._refresh()
                if place.id in document.places.ids():
                    raise PlaceConflictError(place.id)
                self._commit(document.with_places(document.places.geometries + (place,)))
        except MapDataError as e:
            log.error(f"Error adding new place: {e}")
            raise
        log.info(f'Added new place with id "{place.id}"')
        return place

    def delete_places(self, ids: Iterable[str]) -> int:
        """
        Remove every place whose id is in `ids`. Returns how many were removed.
        Nothing is written when no id matches.
        """
        wanted = {ids} if isinstance(ids, str) else set(ids)
        try:
            with self._lock:
                document = self._refresh()
                current = document.places.geometries
                remaining = tuple(p for p in current if p.id not in wanted)
                removed = len(current) - len(remaining)
                if removed == 0:
                    log.info("No matching places found to delete")
                    return 0
                self._commit(document.with_places(remaining))
        except MapDataError as e:
            log.error(f"Error deleting places: {e}")
            raise
        log.info(f"Deleted {removed} place(s) with IDs: {','.join(sorted(map(str, wanted)))}")
        return removed


def _coerce_place(candidate: Any) -> PlaceGeometry:
    if isinstance(candidate, PlaceGeometry):
        place = candidate
    elif isinstance(candidate, Mapping) and candidate.get("type") == POINT_TYPE:
        place = PlaceGeometry.from_dict(candidate)
    else:
        raise DataFormatError("Invalid PlaceGeometry object")
    if place.type != POINT_TYPE or len(place.coordinates) != 2:
        raise DataFormatError("Invalid PlaceGeometry object")
    return place
