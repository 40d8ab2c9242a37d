"""
Shared fixtures: a small TopoJSON file and instrumented storage.
"""

import copy
import json
import os

import pytest

from core.storage import TopologyFile

SAMPLE_TOPOLOGY = {
    "type": "Topology",
    "arcs": [[[0, 0], [10, 5]], [[10, 5], [-3, 7]]],
    "transform": {
        "scale": [0.00037768853390825804, 0.00023159345813645644],
        "translate": [5.8662505149842445, 47.27012252807622],
    },
    "objects": {
        "counties": {
            "type": "GeometryCollection",
            "geometries": [
                {"type": "Polygon", "arcs": [[0, 1]], "properties": {"name": "Köln", "ags": "05315"}},
            ],
        },
        "places": {
            "type": "GeometryCollection",
            "geometries": [
                {
                    "type": "Point",
                    "coordinates": [0, 0],
                    "id": "a",
                    "properties": {"name": "A", "nameEN": None, "state": "X"},
                },
            ],
        },
        "states": {"type": "GeometryCollection", "geometries": [{"type": "MultiPolygon", "arcs": [[[0]]]}]},
        "berlin": {"type": "GeometryCollection", "geometries": []},
    },
    "bbox": [5.86, 47.27, 15.04, 55.06],
}


def make_place(place_id, coordinates=(1, 1), name="B", name_en="B", state="Y"):
    return {
        "type": "Point",
        "coordinates": list(coordinates),
        "id": place_id,
        "properties": {"name": name, "nameEN": name_en, "state": state},
    }


def write_topology(path, data):
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def bump_mtime(path, seconds=5):
    """Move the file's mtime forward so an edit is visible even on coarse clocks."""
    st = os.stat(path)
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + seconds * 1_000_000_000))


class CountingFile(TopologyFile):
    """TopologyFile that counts reads and writes."""

    def __init__(self, path):
        super().__init__(path)
        self.reads = 0
        self.writes = 0

    def read(self):
        self.reads += 1
        return super().read()

    def write(self, data):
        self.writes += 1
        super().write(data)


@pytest.fixture
def sample_topology():
    return copy.deepcopy(SAMPLE_TOPOLOGY)


@pytest.fixture
def topo_path(tmp_path, sample_topology):
    path = tmp_path / "germany.json"
    write_topology(path, sample_topology)
    return path


@pytest.fixture
def counting_file(topo_path):
    return CountingFile(topo_path)
