#!/usr/bin/env python3
"""
Place Map Server
================
Composition root: builds config, logging, the topology store and the table
cache, and mounts the routers. The store and cache live on app.state, so every
request handler shares one instance per app.

Run:
    python server.py
    MAP_TOPOLOGY_PATH=public/germany.json MAP_PORT=3000 python server.py
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import data_routes, topo_routes
from core.config import MapServerConfig, setup_logging
from core.table_cache import TableCache
from core.topo_store import TopologyStore

log = logging.getLogger("server")


def create_app(config: Optional[MapServerConfig] = None) -> FastAPI:
    config = config or MapServerConfig.from_env()

    app = FastAPI(title="Place Map", docs_url=None, redoc_url=None)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.topo_store = TopologyStore(config.topology_path)
    app.state.table_cache = TableCache(config.table_path)

    app.include_router(topo_routes.router)
    app.include_router(data_routes.router)

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    log.info(f"Topology: {config.topology_path}  Table: {config.table_path}")
    return app


def main():
    import uvicorn

    config = MapServerConfig.from_env()
    setup_logging(config.log_level, config.log_file)
    app = create_app(config)
    print(f"Place Map: http://127.0.0.1:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
