"""Tests de construction: routes, colonies, villes (coûts, placement, limites)."""

from __future__ import annotations

import pytest

from catan.engine.board import Building
from catan.engine.errors import (
    BuildingLimitReached,
    IllegalPlacement,
    InsufficientResources,
    InvalidPhase,
    NotCurrentPlayer,
)
from catan.engine.events import CityBuilt, RoadPlaced, SettlementPlaced
from catan.engine.rules import COSTS
from catan.engine.state import TurnPhase

from .builders import corner, give, make_play_engine, put_road, put_settlement, side


def _give_cost(engine, player_id, name, times=1):
    give(engine, player_id, **{res: amount * times for res, amount in COSTS[name].items()})


def _network_engine():
    """Joueur 0: colonie au coin 0 de (0, 0) et route sur le côté 0 (coins 0-1)."""

    engine = make_play_engine(2)
    put_settlement(engine, 0, corner(engine, 0, 0, 0))
    put_road(engine, 0, side(engine, 0, 0, 0))
    return engine


def test_build_road_pays_and_connects():
    engine = _network_engine()
    _give_cost(engine, 0, "road")

    result = engine.build_road(side(engine, 0, 0, 1))

    player = engine.state.players[0]
    assert player.total_resources == 0
    assert side(engine, 0, 0, 1) in player.roads
    assert engine.state.board.edges[side(engine, 0, 0, 1)].owner == 0
    assert result.events == (RoadPlaced(player_id=0, edge_id=side(engine, 0, 0, 1)),)


def test_road_must_touch_network():
    engine = _network_engine()
    _give_cost(engine, 0, "road")
    with pytest.raises(IllegalPlacement):
        engine.build_road(side(engine, 0, 0, 3))


def test_road_cannot_pass_through_opponent_building():
    """Une colonie adverse coupe la continuité du réseau."""

    engine = _network_engine()
    put_settlement(engine, 1, corner(engine, 0, 0, 2))
    put_road(engine, 0, side(engine, 0, 0, 1))
    _give_cost(engine, 0, "road")
    with pytest.raises(IllegalPlacement):
        engine.build_road(side(engine, 0, 0, 2))


def test_road_on_occupied_edge():
    engine = _network_engine()
    put_road(engine, 1, side(engine, 0, 0, 1))
    _give_cost(engine, 0, "road")
    with pytest.raises(IllegalPlacement):
        engine.build_road(side(engine, 0, 0, 1))


def test_road_requires_resources():
    engine = _network_engine()
    with pytest.raises(InsufficientResources):
        engine.build_road(side(engine, 0, 0, 1))


def test_build_settlement_on_network():
    engine = _network_engine()
    put_road(engine, 0, side(engine, 0, 0, 1))
    _give_cost(engine, 0, "settlement")

    node_id = corner(engine, 0, 0, 2)
    result = engine.build_settlement(node_id)

    node = engine.state.board.nodes[node_id]
    assert node.building == Building.SETTLEMENT
    assert node.owner == 0
    assert engine.state.players[0].victory_points == 2
    assert engine.state.players[0].total_resources == 0
    assert result.events == (SettlementPlaced(player_id=0, node_id=node_id),)


def test_settlement_distance_rule():
    engine = _network_engine()
    _give_cost(engine, 0, "settlement")
    with pytest.raises(IllegalPlacement):
        engine.build_settlement(corner(engine, 0, 0, 1))


def test_settlement_requires_own_road():
    engine = _network_engine()
    _give_cost(engine, 0, "settlement")
    with pytest.raises(IllegalPlacement):
        engine.build_settlement(corner(engine, 0, 0, 3))


def test_settlement_on_occupied_node():
    engine = _network_engine()
    _give_cost(engine, 0, "settlement")
    with pytest.raises(IllegalPlacement):
        engine.build_settlement(corner(engine, 0, 0, 0))


def test_settlement_limit():
    engine = _network_engine()
    put_road(engine, 0, side(engine, 0, 0, 1))
    engine.state.players[0].settlements.extend([100, 101, 102, 103])
    _give_cost(engine, 0, "settlement")
    with pytest.raises(BuildingLimitReached):
        engine.build_settlement(corner(engine, 0, 0, 2))


def test_build_city_upgrades_settlement():
    engine = _network_engine()
    _give_cost(engine, 0, "city")
    node_id = corner(engine, 0, 0, 0)

    result = engine.build_city(node_id)

    player = engine.state.players[0]
    assert engine.state.board.nodes[node_id].building == Building.CITY
    assert player.settlements == []
    assert player.cities == [node_id]
    assert player.victory_points == 2
    assert player.buildings_remaining() == {"settlements": 5, "cities": 3, "roads": 14}
    assert result.events == (CityBuilt(player_id=0, node_id=node_id),)


def test_city_requires_own_settlement():
    engine = _network_engine()
    put_settlement(engine, 1, corner(engine, 0, 0, 3))
    _give_cost(engine, 0, "city")
    with pytest.raises(IllegalPlacement):
        engine.build_city(corner(engine, 0, 0, 3))
    with pytest.raises(IllegalPlacement):
        engine.build_city(corner(engine, 0, 0, 2))


def test_city_cannot_be_upgraded_twice():
    engine = _network_engine()
    _give_cost(engine, 0, "city", times=2)
    engine.build_city(corner(engine, 0, 0, 0))
    with pytest.raises(IllegalPlacement):
        engine.build_city(corner(engine, 0, 0, 0))


def test_city_limit():
    engine = _network_engine()
    engine.state.players[0].cities.extend([100, 101, 102, 103])
    _give_cost(engine, 0, "city")
    with pytest.raises(BuildingLimitReached):
        engine.build_city(corner(engine, 0, 0, 0))


def test_road_limit():
    engine = _network_engine()
    engine.state.players[0].roads.extend(range(100, 114))
    _give_cost(engine, 0, "road")
    with pytest.raises(BuildingLimitReached):
        engine.build_road(side(engine, 0, 0, 1))


def test_build_requires_actions_phase():
    engine = make_play_engine(2, turn_phase=TurnPhase.DICE_ROLL)
    put_settlement(engine, 0, corner(engine, 0, 0, 0))
    put_road(engine, 0, side(engine, 0, 0, 0))
    _give_cost(engine, 0, "road")
    with pytest.raises(InvalidPhase):
        engine.build_road(side(engine, 0, 0, 1))


def test_build_out_of_turn():
    engine = _network_engine()
    _give_cost(engine, 1, "road")
    with pytest.raises(NotCurrentPlayer):
        engine.build_road(side(engine, 0, 0, 1), player_id=1)
