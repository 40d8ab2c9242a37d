"""
Map Data Errors
===============
Exception types raised by the topology store, the table cache and the
storage layer underneath them.

    MapDataError
    ├── DataIOError            file missing, unreadable or unwritable
    ├── DataFormatError        bad JSON/spreadsheet, 'places' missing or mistyped
    ├── PlaceValidationError   candidate place failed the schema check
    └── PlaceConflictError     a place with the same id already exists

None of these are retried internally. A mutation that raises leaves both the
cached document and the file on disk as they were.
"""

from pathlib import Path
from typing import Optional


class MapDataError(Exception):
    """Base class for every store/cache failure."""


class DataIOError(MapDataError):
    """A backing file could not be stat'ed, read or written."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class DataFormatError(MapDataError):
    """A backing file (or a place handed to the store) has the wrong shape."""


class PlaceValidationError(MapDataError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class PlaceConflictError(MapDataError):
    def __init__(self, place_id: str):
        super().__init__(f'Place with id "{place_id}" already exists')
        self.place_id = place_id
