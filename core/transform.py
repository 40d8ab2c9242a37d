"""
Grid Transform
==============
Affine mapping between geographic coordinates (lon, lat) and the quantized
integer grid used by the topology file.

    x = round((lon - translate_x) / scale_x)
    lon = x * scale_x + translate_x

Quantizing loses at most half a grid unit per axis, so
topo_to_lon_lat(lon_lat_to_topo(p)) lands within scale/2 of p.

Usage:
    from core.transform import lon_lat_to_topo, topo_to_lon_lat
    x, y = lon_lat_to_topo(13.405, 52.52)
"""

import math
from dataclasses import dataclass
from typing import Mapping, Tuple

# Germany map defaults (public/germany.json)
SCALE_X = 0.00037768853390825804
SCALE_Y = 0.00023159345813645644
TRANSLATE_X = 5.8662505149842445
TRANSLATE_Y = 47.27012252807622


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; the grid uses half-up.
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class GridTransform:
    scale_x: float = SCALE_X
    scale_y: float = SCALE_Y
    translate_x: float = TRANSLATE_X
    translate_y: float = TRANSLATE_Y

    @classmethod
    def from_descriptor(cls, descriptor: Mapping) -> "GridTransform":
        """
        Build from a topology 'transform' entry:
            {"scale": [sx, sy], "translate": [tx, ty]}
        """
        sx, sy = descriptor["scale"]
        tx, ty = descriptor["translate"]
        return cls(float(sx), float(sy), float(tx), float(ty))

    def to_descriptor(self) -> dict:
        return {
            "scale": [self.scale_x, self.scale_y],
            "translate": [self.translate_x, self.translate_y],
        }

    def to_grid(self, lon: float, lat: float) -> Tuple[int, int]:
        x = _round_half_up((lon - self.translate_x) / self.scale_x)
        y = _round_half_up((lat - self.translate_y) / self.scale_y)
        return x, y

    def to_geo(self, x: float, y: float) -> Tuple[float, float]:
        lon = x * self.scale_x + self.translate_x
        lat = y * self.scale_y + self.translate_y
        return lon, lat


DEFAULT_TRANSFORM = GridTransform()


def lon_lat_to_topo(lon: float, lat: float) -> Tuple[int, int]:
    """Geographic -> grid, using the default transform."""
    return DEFAULT_TRANSFORM.to_grid(lon, lat)


def topo_to_lon_lat(x: float, y: float) -> Tuple[float, float]:
    """Grid -> geographic, using the default transform."""
    return DEFAULT_TRANSFORM.to_geo(x, y)
