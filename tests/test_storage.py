"""
Test Topology Storage
Read/parse error split and atomic writes.
"""

import json
import os

import pytest

from core.errors import DataFormatError, DataIOError
from core.storage import TopologyFile


def test_read_returns_parsed_document(topo_path, sample_topology):
    assert TopologyFile(topo_path).read() == sample_topology


def test_missing_file_is_io_error(tmp_path):
    f = TopologyFile(tmp_path / "nope.json")
    with pytest.raises(DataIOError) as exc:
        f.read()
    assert exc.value.path == f.path
    with pytest.raises(DataIOError):
        f.mtime_ns()


def test_malformed_json_is_format_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text('{"type": "Topology", "objects": ', encoding="utf-8")
    with pytest.raises(DataFormatError):
        TopologyFile(path).read()


def test_non_object_root_is_format_error(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(DataFormatError):
        TopologyFile(path).read()


def test_write_replaces_file_and_leaves_no_temp(topo_path, sample_topology):
    f = TopologyFile(topo_path)
    sample_topology["objects"]["berlin"]["geometries"].append({"type": "Point", "coordinates": [1, 2]})
    f.write(sample_topology)

    assert json.loads(topo_path.read_text(encoding="utf-8")) == sample_topology
    assert os.listdir(topo_path.parent) == [topo_path.name]


def test_write_keeps_non_ascii(topo_path, sample_topology):
    TopologyFile(topo_path).write(sample_topology)
    assert "Köln" in topo_path.read_text(encoding="utf-8")


def test_failed_replace_leaves_original_and_cleans_temp(topo_path, sample_topology, monkeypatch):
    before = topo_path.read_text(encoding="utf-8")

    def refuse(src, dst):
        raise PermissionError("read-only")

    monkeypatch.setattr(os, "replace", refuse)
    sample_topology["objects"]["places"]["geometries"] = []
    with pytest.raises(DataIOError):
        TopologyFile(topo_path).write(sample_topology)

    assert topo_path.read_text(encoding="utf-8") == before
    assert os.listdir(topo_path.parent) == [topo_path.name]


def test_unwritable_directory_is_io_error(tmp_path, sample_topology):
    f = TopologyFile(tmp_path / "missing-dir" / "germany.json")
    with pytest.raises(DataIOError):
        f.write(sample_topology)


def test_mtime_changes_after_write(topo_path, sample_topology):
    f = TopologyFile(topo_path)
    st = os.stat(topo_path)
    os.utime(topo_path, ns=(st.st_atime_ns, st.st_mtime_ns - 10_000_000_000))
    old = f.mtime_ns()
    f.write(sample_topology)
    assert f.mtime_ns() != old


def test_write_refuses_nan_and_keeps_original(topo_path, sample_topology):
    before = topo_path.read_text(encoding="utf-8")
    sample_topology["objects"]["places"]["geometries"][0]["coordinates"] = [float("nan"), 1]
    with pytest.raises(DataFormatError):
        TopologyFile(topo_path).write(sample_topology)
    assert topo_path.read_text(encoding="utf-8") == before
    assert os.listdir(topo_path.parent) == [topo_path.name]


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_read_rejects_non_finite_literals(tmp_path, literal):
    path = tmp_path / "germany.json"
    path.write_text('{"coordinates": [%s, 1]}' % literal, encoding="utf-8")
    with pytest.raises(DataFormatError):
        TopologyFile(path).read()
