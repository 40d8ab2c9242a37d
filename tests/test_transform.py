"""
Test Grid Transform
Geographic <-> grid conversion and its quantization bound.
"""

import math

import pytest

from core.transform import (
    DEFAULT_TRANSFORM,
    SCALE_X,
    SCALE_Y,
    TRANSLATE_X,
    TRANSLATE_Y,
    GridTransform,
    lon_lat_to_topo,
    topo_to_lon_lat,
)


def test_origin_maps_to_zero():
    assert lon_lat_to_topo(TRANSLATE_X, TRANSLATE_Y) == (0, 0)
    assert topo_to_lon_lat(0, 0) == (TRANSLATE_X, TRANSLATE_Y)


def test_grid_to_geo_is_affine():
    lon, lat = topo_to_lon_lat(1000, -250)
    assert lon == pytest.approx(1000 * SCALE_X + TRANSLATE_X)
    assert lat == pytest.approx(-250 * SCALE_Y + TRANSLATE_Y)


def test_to_grid_returns_integers():
    x, y = lon_lat_to_topo(13.404954, 52.520008)
    assert isinstance(x, int) and isinstance(y, int)


@pytest.mark.parametrize(
    "lon,lat",
    [
        (13.404954, 52.520008),   # Berlin
        (6.959974, 50.938361),    # Köln
        (11.575382, 48.137108),   # München
        (5.8662505149842445, 47.27012252807622),
        (-3.7, 40.4),
        (15.04, 55.06),
    ],
)
def test_round_trip_within_half_a_grid_unit(lon, lat):
    back_lon, back_lat = topo_to_lon_lat(*lon_lat_to_topo(lon, lat))
    assert abs(back_lon - lon) <= SCALE_X / 2 + 1e-12
    assert abs(back_lat - lat) <= SCALE_Y / 2 + 1e-12


def test_halves_round_up():
    t = GridTransform(scale_x=1.0, scale_y=1.0, translate_x=0.0, translate_y=0.0)
    assert t.to_grid(0.5, 2.5) == (1, 3)
    assert t.to_grid(-0.5, -2.5) == (0, -2)
    assert t.to_grid(1.49, -1.51) == (1, -2)


def test_grid_points_are_fixed_points():
    for x, y in [(0, 0), (17, 4), (-300, 9999)]:
        assert lon_lat_to_topo(*topo_to_lon_lat(x, y)) == (x, y)


def test_descriptor_round_trip(sample_topology):
    t = GridTransform.from_descriptor(sample_topology["transform"])
    assert t == DEFAULT_TRANSFORM
    assert t.to_descriptor() == sample_topology["transform"]


def test_custom_descriptor():
    t = GridTransform.from_descriptor({"scale": [2, 4], "translate": [10, 20]})
    assert t.to_grid(14, 28) == (2, 2)
    lon, lat = t.to_geo(2, 2)
    assert math.isclose(lon, 14) and math.isclose(lat, 28)
