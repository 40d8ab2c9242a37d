"""
Map Server Config
=================
Process configuration: which files back the store and the table cache,
where to listen, how to log.

Every value can be overridden from the environment:

    MAP_TOPOLOGY_PATH   TopoJSON file with the 'places' collection
    MAP_TABLE_PATH      spreadsheet served by /api/all-data
    MAP_HOST / MAP_PORT
    MAP_LOG_LEVEL       DEBUG, INFO, ...
    MAP_LOG_FILE        optional, logs are also written here
    MAP_CORS_ORIGINS    comma separated, "*" by default
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

DEFAULT_TOPOLOGY_PATH = "public/germany.json"
DEFAULT_TABLE_PATH = "server/data/src/Tabelle_IntenDATEN_2025.xlsx"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class MapServerConfig(BaseModel):
    topology_path: Path = Path(DEFAULT_TOPOLOGY_PATH)
    table_path: Path = Path(DEFAULT_TABLE_PATH)
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls, environ=None) -> "MapServerConfig":
        env = os.environ if environ is None else environ
        origins = env.get("MAP_CORS_ORIGINS", "*")
        return cls(
            topology_path=Path(env.get("MAP_TOPOLOGY_PATH", DEFAULT_TOPOLOGY_PATH)).resolve(),
            table_path=Path(env.get("MAP_TABLE_PATH", DEFAULT_TABLE_PATH)).resolve(),
            host=env.get("MAP_HOST", "0.0.0.0"),
            port=int(env.get("MAP_PORT", "3000")),
            log_level=env.get("MAP_LOG_LEVEL", "INFO").upper(),
            log_file=Path(env["MAP_LOG_FILE"]) if env.get("MAP_LOG_FILE") else None,
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Console logging, plus a file when log_file is set. Safe to call again."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Drop handlers from a previous call so records are not emitted twice
    for handler in [h for h in root.handlers if getattr(h, "_map_server", False)]:
        root.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler._map_server = True
        root.addHandler(handler)
