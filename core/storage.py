"""
Topology Storage
================
Filesystem persistence for the TopoJSON document.

Thin storage layer. No place logic.
Persistence only - the store decides, storage persists.

- read() parses the whole file; OS failures and JSON failures are reported
  as different errors (DataIOError vs DataFormatError). NaN and Infinity are
  JSON failures in both directions.
- write() is atomic: temp file -> fsync -> os.replace. A reader (or a crash)
  sees either the old document or the new one, never a partial file.
- mtime_ns() is what the store polls to notice external edits.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Union

from core.errors import DataFormatError, DataIOError

log = logging.getLogger("topo_storage")


def _reject_constant(name: str):
    # Python accepts NaN/Infinity literals, JSON does not
    raise ValueError(f"{name} is not valid JSON")


class TopologyFile:
    """JSON file at a fixed path."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).resolve()

    def __repr__(self):
        return f"TopologyFile({str(self.path)!r})"

    # =========================================================================
    # FRESHNESS
    # =========================================================================

    def mtime_ns(self) -> int:
        try:
            return os.stat(self.path).st_mtime_ns
        except OSError as e:
            raise DataIOError(f"Cannot access {self.path}: {e}", self.path) from e

    # =========================================================================
    # READ
    # =========================================================================

    def read(self) -> Any:
        """Load and parse the file."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise DataIOError(f"Cannot read {self.path}: {e}", self.path) from e

        try:
            data = json.loads(text, parse_constant=_reject_constant)
        except ValueError as e:
            raise DataFormatError(f"Malformed JSON in {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise DataFormatError(f"TopoJSON root in {self.path} must be an object")
        log.debug(f"Read {len(text)} bytes from {self.path}")
        return data

    # =========================================================================
    # WRITE (atomic)
    # =========================================================================

    def write(self, data: Any) -> None:
        """
        Serialize and replace the file.
        Uses atomic write pattern (write temp -> rename).
        """
        try:
            content = json.dumps(data, indent=2, ensure_ascii=False, allow_nan=False)
        except ValueError as e:
            raise DataFormatError(f"Refusing to write {self.path}: {e}") from e
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError as cleanup_error:
                    log.warning(f"Could not remove temp file {tmp_path}: {cleanup_error}")
            raise DataIOError(f"Cannot write {self.path}: {e}", self.path) from e
        log.info(f"TopoJSON data saved to {self.path}")
