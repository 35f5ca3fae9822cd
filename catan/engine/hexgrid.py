"""Géométrie des hexagones en coordonnées axiales (pointy-top).

Conventions:
- repère écran (y vers le bas), centre du plateau à l'origine
- coin ``i`` d'un hexagone à l'angle ``60°·i − 30°``
- le côté ``i`` relie les coins ``i`` et ``(i + 1) % 6``
"""

from __future__ import annotations

import math
from typing import List, Tuple

Point = Tuple[float, float]
GridKey = Tuple[int, int]

SQRT3: float = math.sqrt(3.0)
DEFAULT_HEX_SIZE: int = 48

# Voisin axial (dq, dr) partageant le côté i
SIDE_DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (1, 0),  # E
    (0, 1),  # SE
    (-1, 1),  # SO
    (-1, 0),  # O
    (0, -1),  # NO
    (1, -1),  # NE
)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def axial_to_pixel(q: int, r: int, size: float = DEFAULT_HEX_SIZE) -> Point:
    """Projette le centre de l'hexagone (q, r) en pixels."""

    x = size * SQRT3 * (q + r / 2)
    y = size * 1.5 * r
    return x, y


def cube_round(q: float, r: float) -> Tuple[int, int]:
    """Arrondit des coordonnées axiales fractionnaires à l'hexagone le plus proche.

    Les trois composantes cube (q, r, s) sont arrondies indépendamment puis
    celle qui a subi la plus grande erreur est recalculée à partir des deux
    autres pour rétablir ``q + r + s == 0``.
    """

    s = -q - r
    rq = _round_half_up(q)
    rr = _round_half_up(r)
    rs = _round_half_up(s)

    q_diff = abs(rq - q)
    r_diff = abs(rr - r)
    s_diff = abs(rs - s)

    if q_diff > r_diff and q_diff > s_diff:
        rq = -rr - rs
    elif r_diff > s_diff:
        rr = -rq - rs
    return rq, rr


def pixel_to_axial(x: float, y: float, size: float = DEFAULT_HEX_SIZE) -> Tuple[int, int]:
    """Inverse de :func:`axial_to_pixel` suivi d'un arrondi cube."""

    q = (SQRT3 / 3 * x - y / 3) / size
    r = (2 / 3 * y) / size
    return cube_round(q, r)


def hex_corners(center: Point, size: float = DEFAULT_HEX_SIZE) -> List[Point]:
    """Retourne les 6 coins d'un hexagone, dans le sens horaire (écran)."""

    cx, cy = center
    corners: List[Point] = []
    for i in range(6):
        angle = math.radians(60 * i - 30)
        corners.append((cx + size * math.cos(angle), cy + size * math.sin(angle)))
    return corners


def grid_key(point: Point, unit: int = 1) -> GridKey:
    """Quantifie un point sur une grille entière pour servir de clé de dictionnaire.

    ``unit`` doit rester très inférieur à la distance entre deux coins
    (``size / 2``) pour que deux coins distincts ne fusionnent jamais.
    """

    x, y = point
    return _round_half_up(x / unit), _round_half_up(y / unit)


def hex_distance(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    """Distance hexagonale entre deux positions axiales."""

    dq = a[0] - b[0]
    dr = a[1] - b[1]
    return (abs(dq) + abs(dr) + abs(dq + dr)) // 2


__all__ = [
    "DEFAULT_HEX_SIZE",
    "SIDE_DIRECTIONS",
    "Point",
    "GridKey",
    "axial_to_pixel",
    "pixel_to_axial",
    "cube_round",
    "hex_corners",
    "grid_key",
    "hex_distance",
]
