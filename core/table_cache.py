"""
Table Cache
===========
Read-only cache of a spreadsheet (first worksheet, first row = headers).

Same freshness rule as the topology store: the file is re-read only when its
mtime changes. Rows come back as plain dicts keyed by header; empty cells
are None.

Usage:
    cache = TableCache("server/data/src/Tabelle_IntenDATEN_2025.xlsx")
    rows = cache.get_rows()
"""

import logging
import os
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union
from zipfile import BadZipFile

import pandas as pd

from core.errors import DataFormatError, DataIOError

log = logging.getLogger("table_cache")

# ?type= query value -> 'Theater' column value
THEATRE_TYPES = {
    "city": "Stadttheater",
    "regional": "Landestheater",
    "state": "Staatstheater",
    "private": "Privattheater",
}


class TableCache:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).resolve()
        self._rows: Optional[List[Dict]] = None
        self._mtime_ns: Optional[int] = None
        self._lock = threading.Lock()

    def _load(self) -> List[Dict]:
        try:
            frame = pd.read_excel(self.path, sheet_name=0, engine="openpyxl")
        except OSError as e:
            raise DataIOError(f"Cannot read {self.path}: {e}", self.path) from e
        except (ValueError, BadZipFile) as e:
            raise DataFormatError(f"Unreadable spreadsheet {self.path}: {e}") from e

        frame = frame.dropna(how="all")
        frame = frame.astype(object).where(pd.notna(frame), None)
        rows = frame.to_dict(orient="records")
        log.info(f"Excel data loaded and cached ({len(rows)} rows)")
        return rows

    def get_rows(self) -> List[Dict]:
        """All data rows, re-reading the file if it changed."""
        with self._lock:
            try:
                mtime = os.stat(self.path).st_mtime_ns
            except OSError as e:
                raise DataIOError(f"Cannot access {self.path}: {e}", self.path) from e
            if self._rows is None or mtime != self._mtime_ns:
                self._rows = self._load()
                self._mtime_ns = mtime
            return list(self._rows)

    def get_theatres(self, theatre_type: Optional[str] = None) -> List[Dict]:
        """
        Theatre rows projected to the map's shape, optionally filtered by
        type ('city', 'regional', 'state', 'private'). Unknown types do not filter.
        """
        rows = self.get_rows()
        wanted = THEATRE_TYPES.get(theatre_type)
        if wanted is not None:
            rows = [r for r in rows if r.get("Theater") == wanted]
        return [
            {
                "name": r.get("Haus"),
                "state": r.get("BL"),
                "region": r.get("Ost / West"),
                "legalStruct": r.get("Rechtsform"),
                "city": r.get("Stadt"),
                "type": r.get("Theater"),
            }
            for r in rows
        ]
