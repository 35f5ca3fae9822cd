"""Tests de topologie du plateau standard (tuiles, sommets, arêtes, ports)."""

from __future__ import annotations

import random
from collections import Counter

import pytest

from catan.engine.board import (
    GENERIC,
    PORT_TYPES,
    STANDARD_LAYOUT,
    Board,
)
from catan.engine.rules import (
    DESERT,
    GENERIC_PORT_RATIO,
    RESOURCE_TYPES,
    SPECIAL_PORT_RATIO,
    TILE_BAG,
    TOKEN_BAG,
    pip_count,
)


def _boards():
    return [Board.standard()] + [Board.generate(random.Random(seed)) for seed in range(5)]


@pytest.mark.parametrize("board", _boards())
def test_standard_counts(board):
    """19 tuiles, 54 sommets, 72 arêtes quel que soit le mélange."""

    assert board.tile_count() == 19
    assert board.node_count() == 54
    assert board.edge_count() == 72


@pytest.mark.parametrize("board", _boards())
def test_resources_and_tokens(board):
    resources = Counter(tile.resource for tile in board.tiles)
    assert dict(resources) == TILE_BAG

    tokens = sorted(tile.token for tile in board.tiles if tile.token is not None)
    assert tokens == sorted(TOKEN_BAG)
    assert 7 not in tokens

    for tile in board.tiles:
        assert (tile.token is None) == (tile.resource == DESERT)


@pytest.mark.parametrize("board", _boards())
def test_robber_starts_on_desert(board):
    desert = board.desert_tile()
    assert board.robber_tile_id == desert.tile_id
    assert [tile.tile_id for tile in board.tiles if tile.has_robber] == [desert.tile_id]


def test_tiles_follow_standard_layout():
    board = Board.standard()
    assert [tile.axial for tile in board.tiles] == list(STANDARD_LAYOUT)
    assert board.tile_at(0, 0).resource == DESERT
    assert board.tile_at(5, 5) is None


def test_each_tile_has_six_distinct_nodes_and_edges():
    board = Board.standard()
    for tile in board.tiles:
        assert len(set(tile.node_ids)) == 6
        assert len(set(tile.edge_ids)) == 6
        for node_id in tile.node_ids:
            assert tile.tile_id in board.nodes[node_id].adjacent_tiles


def test_node_graph_is_consistent():
    """Adjacence symétrique, degré 2 ou 3, arêtes canoniques (min, max)."""

    board = Board.standard()
    degree_total = 0
    for node in board.nodes:
        assert 1 <= len(node.adjacent_tiles) <= 3
        assert len(node.neighbors) in (2, 3)
        assert len(node.edges) == len(node.neighbors)
        degree_total += len(node.neighbors)
        for neighbor in node.neighbors:
            assert node.node_id in board.nodes[neighbor].neighbors
            edge = board.edge_between(node.node_id, neighbor)
            assert edge is not None
            assert edge.edge_id in node.edges
    assert degree_total == 2 * board.edge_count()

    for edge in board.edges:
        a, b = edge.nodes
        assert a < b
        assert edge.other(a) == b
        assert edge.other(b) == a


def test_coastal_nodes():
    """30 sommets en bordure (moins de 3 tuiles adjacentes)."""

    board = Board.standard()
    coastal = [node for node in board.nodes if len(node.adjacent_tiles) < 3]
    assert len(coastal) == 30


def test_ports():
    """9 ports: 4 génériques (3:1) et un 2:1 par ressource, sur 18 sommets côtiers."""

    board = Board.standard()
    kinds = Counter(port.kind for port in board.ports)
    assert kinds[GENERIC] == 4
    assert all(kinds[resource] == 1 for resource in RESOURCE_TYPES)
    assert set(kinds) <= set(PORT_TYPES)

    port_nodes = [node_id for port in board.ports for node_id in port.nodes]
    assert len(port_nodes) == len(set(port_nodes)) == 18

    for port in board.ports:
        expected = GENERIC_PORT_RATIO if port.kind == GENERIC else SPECIAL_PORT_RATIO
        assert port.ratio == expected
        a, b = port.nodes
        assert board.edge_between(a, b) is not None
        for node_id in port.nodes:
            node = board.nodes[node_id]
            assert node.port == port.kind
            assert len(node.adjacent_tiles) < 3


def test_generate_is_reproducible():
    first = Board.generate(random.Random(42))
    second = Board.generate(random.Random(42))
    assert [(t.resource, t.token) for t in first.tiles] == [(t.resource, t.token) for t in second.tiles]


def test_topology_independent_of_assignment():
    """Les ids de sommets/arêtes ne dépendent que des positions axiales."""

    first = Board.generate(random.Random(1))
    second = Board.generate(random.Random(2))
    assert [tile.node_ids for tile in first.tiles] == [tile.node_ids for tile in second.tiles]
    assert [edge.nodes for edge in first.edges] == [edge.nodes for edge in second.edges]


def test_build_rejects_malformed_assignment():
    with pytest.raises(AssertionError):
        Board.build([(DESERT, None)] * 19)


def test_pip_count():
    assert pip_count(None) == 0
    assert pip_count(2) == 1
    assert pip_count(6) == 5
    assert pip_count(8) == 5
    assert pip_count(12) == 1
