"""Plateau de jeu Catane standard (19 tuiles).

Cette implémentation expose un plateau complet:
- coordonnées axiales pour chaque tuile (rangées 3-4-5-4-3)
- graphe dédupliqué des sommets (54) et arêtes (72) dérivé des coins d'hexagones
- 9 ports (4 génériques 3:1 + 5 spécifiques 2:1)

Les sommets sont indexés dans l'ordre de première apparition (tuile par tuile,
coin par coin). Toutes les références entre entités sont des identifiants
entiers dans les listes `tiles` / `nodes` / `edges`.
"""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from catan.engine.hexgrid import (
    DEFAULT_HEX_SIZE,
    GridKey,
    Point,
    axial_to_pixel,
    grid_key,
    hex_corners,
    hex_distance,
)
from catan.engine.rules import (
    BRICK,
    DESERT,
    GENERIC_PORT_RATIO,
    ORE,
    SHEEP,
    SPECIAL_PORT_RATIO,
    TILE_BAG,
    TOKEN_BAG,
    WHEAT,
    WOOD,
)

GENERIC = "generic"
PORT_TYPES: Tuple[str, ...] = (GENERIC, WOOD, BRICK, SHEEP, WHEAT, ORE)


class Building(Enum):
    """Construction posée sur un sommet."""

    SETTLEMENT = "settlement"
    CITY = "city"


@dataclass
class Tile:
    tile_id: int
    q: int
    r: int
    resource: str
    token: int | None
    node_ids: Tuple[int, ...] = ()
    edge_ids: Tuple[int, ...] = ()
    has_robber: bool = False

    @property
    def axial(self) -> Tuple[int, int]:
        return self.q, self.r


@dataclass
class Node:
    node_id: int
    position: Point
    adjacent_tiles: List[int] = field(default_factory=list)
    neighbors: List[int] = field(default_factory=list)
    edges: List[int] = field(default_factory=list)
    building: Building | None = None
    owner: int | None = None
    port: str | None = None


@dataclass
class Edge:
    edge_id: int
    nodes: Tuple[int, int]
    owner: int | None = None

    def other(self, node_id: int) -> int:
        a, b = self.nodes
        return b if node_id == a else a


@dataclass(frozen=True)
class Port:
    port_id: int
    kind: str
    ratio: int
    nodes: Tuple[int, int]


# Positions axiales du plateau standard, rangée par rangée (haut → bas)
STANDARD_LAYOUT: Tuple[Tuple[int, int], ...] = (
    (0, -2), (1, -2), (2, -2),
    (-1, -1), (0, -1), (1, -1), (2, -1),
    (-2, 0), (-1, 0), (0, 0), (1, 0), (2, 0),
    (-2, 1), (-1, 1), (0, 1), (1, 1),
    (-2, 2), (-1, 2), (0, 2),
)

# Plateau fixe (ressource, jeton) aligné sur STANDARD_LAYOUT, désert au centre
STANDARD_ASSIGNMENT: Tuple[Tuple[str, int | None], ...] = (
    (ORE, 10), (SHEEP, 2), (WOOD, 9),
    (WHEAT, 12), (BRICK, 6), (SHEEP, 4), (BRICK, 10),
    (WHEAT, 9), (WOOD, 11), (DESERT, None), (WOOD, 3), (ORE, 8),
    (WOOD, 8), (ORE, 3), (WHEAT, 4), (SHEEP, 5),
    (BRICK, 5), (WHEAT, 6), (SHEEP, 11),
)

# Ports: (q, r, côté tourné vers la mer, type). Le côté i relie les coins i et i+1.
PORT_TABLE: Tuple[Tuple[int, int, int, str], ...] = (
    (-1, -1, 4, GENERIC),
    (0, -2, 5, WHEAT),
    (2, -2, 5, ORE),
    (2, -1, 0, GENERIC),
    (2, 0, 1, SHEEP),
    (0, 2, 1, GENERIC),
    (-1, 2, 2, GENERIC),
    (-2, 2, 3, BRICK),
    (-2, 0, 3, WOOD),
)

STANDARD_ROW_SIZES: Tuple[int, ...] = (3, 4, 5, 4, 3)
STANDARD_NODE_COUNT = 54
STANDARD_EDGE_COUNT = 72


def _validate_layout(layout: Sequence[Tuple[int, int]]) -> None:
    assert len(layout) == 19, "le plateau standard compte 19 tuiles"
    assert len(set(layout)) == len(layout), "positions axiales dupliquées"
    assert all(hex_distance(pos, (0, 0)) <= 2 for pos in layout), "position hors plateau"
    rows = Counter(r for _, r in layout)
    assert tuple(rows[r] for r in sorted(rows)) == STANDARD_ROW_SIZES, (
        "les rangées doivent former 3-4-5-4-3"
    )


@dataclass
class Board:
    """Graphe tuiles / sommets / arêtes / ports du plateau standard."""

    tiles: List[Tile]
    nodes: List[Node]
    edges: List[Edge]
    ports: List[Port]
    robber_tile_id: int
    hex_size: int = DEFAULT_HEX_SIZE
    _edge_index: Dict[Tuple[int, int], int] = field(
        default_factory=dict, repr=False, compare=False
    )

    # -- API comptage --
    def tile_count(self) -> int:
        return len(self.tiles)

    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        return len(self.edges)

    # -- Requêtes --
    def edge_between(self, node_a: int, node_b: int) -> Optional[Edge]:
        edge_id = self._edge_index.get((min(node_a, node_b), max(node_a, node_b)))
        return None if edge_id is None else self.edges[edge_id]

    def tile_at(self, q: int, r: int) -> Optional[Tile]:
        for tile in self.tiles:
            if tile.q == q and tile.r == r:
                return tile
        return None

    def desert_tile(self) -> Tile:
        return next(tile for tile in self.tiles if tile.resource == DESERT)

    # -- Construction du plateau --
    @classmethod
    def standard(cls, *, hex_size: int = DEFAULT_HEX_SIZE) -> "Board":
        """Plateau fixe, utile pour des tests reproductibles."""

        return cls.build(STANDARD_ASSIGNMENT, hex_size=hex_size)

    @classmethod
    def generate(
        cls,
        rng: random.Random | None = None,
        *,
        hex_size: int = DEFAULT_HEX_SIZE,
    ) -> "Board":
        """Génère un plateau aléatoire: tuiles et jetons mélangés indépendamment.

        Args:
            rng: Générateur pseudo-aléatoire (reproductibilité)
            hex_size: Taille d'hexagone utilisée pour quantifier les sommets

        Returns:
            Un nouveau Board; les jetons sont distribués aux tuiles non-désert
            dans l'ordre du mélange.
        """
        rng = rng or random.Random()

        resources = [resource for resource, count in TILE_BAG.items() for _ in range(count)]
        tokens = list(TOKEN_BAG)
        # random.shuffle est un Fisher-Yates
        rng.shuffle(resources)
        rng.shuffle(tokens)

        token_iter = iter(tokens)
        assignments = [
            (resource, None if resource == DESERT else next(token_iter))
            for resource in resources
        ]
        return cls.build(assignments, hex_size=hex_size)

    @classmethod
    def build(
        cls,
        assignments: Sequence[Tuple[str, int | None]],
        *,
        hex_size: int = DEFAULT_HEX_SIZE,
    ) -> "Board":
        """Construit le graphe à partir d'une affectation (ressource, jeton) par tuile."""

        _validate_layout(STANDARD_LAYOUT)
        assert len(assignments) == len(STANDARD_LAYOUT), "une affectation par tuile"
        assert sum(1 for resource, _ in assignments if resource == DESERT) == 1

        tiles: List[Tile] = []
        nodes: List[Node] = []
        edges: List[Edge] = []
        key_to_node: Dict[GridKey, int] = {}
        edge_index: Dict[Tuple[int, int], int] = {}

        for tile_id, ((q, r), (resource, token)) in enumerate(
            zip(STANDARD_LAYOUT, assignments)
        ):
            assert (token is None) == (resource == DESERT), "jeton absent ssi désert"
            assert token != 7, "aucun jeton 7"

            center = axial_to_pixel(q, r, hex_size)
            corner_ids: List[int] = []
            for corner in hex_corners(center, hex_size):
                key = grid_key(corner)
                node_id = key_to_node.get(key)
                if node_id is None:
                    node_id = len(nodes)
                    key_to_node[key] = node_id
                    nodes.append(Node(node_id=node_id, position=(float(key[0]), float(key[1]))))
                nodes[node_id].adjacent_tiles.append(tile_id)
                corner_ids.append(node_id)

            edge_ids: List[int] = []
            for idx in range(6):
                a = corner_ids[idx]
                b = corner_ids[(idx + 1) % 6]
                pair = (min(a, b), max(a, b))
                edge_id = edge_index.get(pair)
                if edge_id is None:
                    edge_id = len(edges)
                    edge_index[pair] = edge_id
                    edges.append(Edge(edge_id=edge_id, nodes=pair))
                    # Adjacence sommet ↔ sommet, indépendante de la liste d'arêtes
                    nodes[a].neighbors.append(b)
                    nodes[b].neighbors.append(a)
                    nodes[a].edges.append(edge_id)
                    nodes[b].edges.append(edge_id)
                edge_ids.append(edge_id)

            tiles.append(
                Tile(
                    tile_id=tile_id,
                    q=q,
                    r=r,
                    resource=resource,
                    token=token,
                    node_ids=tuple(corner_ids),
                    edge_ids=tuple(edge_ids),
                    has_robber=(resource == DESERT),
                )
            )

        assert len(nodes) == STANDARD_NODE_COUNT, f"{len(nodes)} sommets au lieu de 54"
        assert len(edges) == STANDARD_EDGE_COUNT, f"{len(edges)} arêtes au lieu de 72"

        ports = cls._attach_ports(tiles, nodes)
        robber_tile_id = next(tile.tile_id for tile in tiles if tile.resource == DESERT)

        return cls(
            tiles=tiles,
            nodes=nodes,
            edges=edges,
            ports=ports,
            robber_tile_id=robber_tile_id,
            hex_size=hex_size,
            _edge_index=edge_index,
        )

    @staticmethod
    def _attach_ports(tiles: List[Tile], nodes: List[Node]) -> List[Port]:
        by_axial = {tile.axial: tile for tile in tiles}
        ports: List[Port] = []
        for port_id, (q, r, side, kind) in enumerate(PORT_TABLE):
            tile = by_axial[(q, r)]
            a = tile.node_ids[side]
            b = tile.node_ids[(side + 1) % 6]
            shared = set(nodes[a].adjacent_tiles) & set(nodes[b].adjacent_tiles)
            assert shared == {tile.tile_id}, f"port {port_id} n'est pas sur la côte"
            for node_id in (a, b):
                assert nodes[node_id].port is None, f"sommet {node_id} déjà portuaire"
                nodes[node_id].port = kind
            ratio = GENERIC_PORT_RATIO if kind == GENERIC else SPECIAL_PORT_RATIO
            ports.append(
                Port(port_id=port_id, kind=kind, ratio=ratio, nodes=(min(a, b), max(a, b)))
            )
        return ports


__all__ = [
    "GENERIC",
    "PORT_TYPES",
    "PORT_TABLE",
    "STANDARD_LAYOUT",
    "STANDARD_ASSIGNMENT",
    "Board",
    "Building",
    "Tile",
    "Node",
    "Edge",
    "Port",
]
