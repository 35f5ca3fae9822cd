"""Tests d'énumération des actions légales."""

from __future__ import annotations

from catan.engine.actions import (
    BuildCity,
    BuildRoad,
    BuildSettlement,
    DiscardCards,
    EndTurn,
    MoveRobber,
    PlaceInitialRoad,
    PlaceInitialSettlement,
    PlayKnight,
    PlayRoadBuilding,
    RollDice,
    TradeWithBank,
)
from catan.engine.rules import KNIGHT, ROAD_BUILDING, WOOD
from catan.engine.state import TurnPhase

from .builders import corner, give, make_engine, make_play_engine, put_road, put_settlement, side


def test_setup_offers_every_node_then_adjacent_roads():
    engine = make_engine(2)
    legal = engine.legal_actions()
    assert len(legal) == 54
    assert all(isinstance(action, PlaceInitialSettlement) for action in legal)

    node_id = corner(engine, 0, 0, 0)
    engine.place_initial_settlement(node_id)
    legal = engine.legal_actions()
    assert {action.edge_id for action in legal} == set(engine.state.board.nodes[node_id].edges)
    assert all(isinstance(action, PlaceInitialRoad) for action in legal)


def test_setup_respects_distance_rule():
    engine = make_engine(2)
    node_id = corner(engine, 0, 0, 0)
    engine.place_initial_settlement(node_id)
    engine.place_initial_road(engine.state.board.nodes[node_id].edges[0])

    legal_nodes = {action.node_id for action in engine.legal_actions()}
    blocked = {node_id, *engine.state.board.nodes[node_id].neighbors}
    assert legal_nodes.isdisjoint(blocked)
    assert len(legal_nodes) == 54 - len(blocked)


def test_dice_phase():
    engine = make_play_engine(2, turn_phase=TurnPhase.DICE_ROLL)
    assert engine.legal_actions() == [RollDice()]

    engine.state.players[0].dev_cards[KNIGHT] = 1
    legal = engine.legal_actions()
    assert RollDice() in legal
    assert sum(isinstance(action, PlayKnight) for action in legal) == 18


def test_actions_phase_without_resources_only_ends_turn(play_engine):
    assert play_engine.legal_actions() == [EndTurn()]


def test_actions_phase_with_resources():
    engine = make_play_engine(2)
    put_settlement(engine, 0, corner(engine, 0, 0, 0))
    put_road(engine, 0, side(engine, 0, 0, 0))
    give(engine, 0, wood=4, brick=1, sheep=1, wheat=3, ore=3)

    legal = engine.legal_actions()

    roads = {action.edge_id for action in legal if isinstance(action, BuildRoad)}
    node = engine.state.board.nodes[corner(engine, 0, 0, 0)]
    far = engine.state.board.nodes[corner(engine, 0, 0, 1)]
    expected_roads = (set(node.edges) | set(far.edges)) - {side(engine, 0, 0, 0)}
    assert roads == expected_roads
    assert BuildCity(node_id=node.node_id) in legal
    assert not any(isinstance(action, BuildSettlement) for action in legal)
    assert TradeWithBank(give=WOOD, receive="ore") in legal
    assert legal[-1] == EndTurn()


def test_discard_candidates_cover_every_split():
    engine = make_play_engine(2, turn_phase=TurnPhase.DICE_ROLL)
    give(engine, 0, wood=6, brick=2)
    engine.roll_dice(forced=(3, 4))

    legal = engine.legal_actions()
    assert all(isinstance(action, DiscardCards) for action in legal)
    assert {action.player_id for action in legal} == {0}
    assert all(sum(action.resources.values()) == 4 for action in legal)
    # 4 bois, 3 bois + 1 brique, 2 bois + 2 briques
    assert len(legal) == 3


def test_robber_candidates_include_victims():
    engine = make_play_engine(2, turn_phase=TurnPhase.ROBBER_PLACEMENT)
    put_settlement(engine, 1, corner(engine, 0, -2, 5))
    legal = engine.legal_actions()
    assert all(isinstance(action, MoveRobber) for action in legal)
    tile_id = engine.state.board.tile_at(0, -2).tile_id
    assert MoveRobber(tile_id=tile_id, victim_id=1) in legal
    assert MoveRobber(tile_id=tile_id, victim_id=None) in legal
    assert len(legal) == 18 + 1


def test_road_building_candidates_are_legal():
    engine = make_play_engine(2)
    put_settlement(engine, 0, corner(engine, 0, 0, 0))
    engine.state.players[0].dev_cards[ROAD_BUILDING] = 1

    legal = [action for action in engine.legal_actions() if isinstance(action, PlayRoadBuilding)]

    assert PlayRoadBuilding(edge_ids=(side(engine, 0, 0, 0), side(engine, 0, 0, 1))) in legal
    assert len({action.edge_ids for action in legal}) == len(legal)
    for action in legal:
        assert engine.is_legal(action)


def test_legal_actions_always_apply():
    """Chaque action énumérée s'applique sans erreur sur une copie du moteur."""

    engine = make_play_engine(2)
    put_settlement(engine, 0, corner(engine, 0, 0, 0))
    put_road(engine, 0, side(engine, 0, 0, 0))
    give(engine, 0, wood=2, brick=2, sheep=1, wheat=2, ore=3)

    for action in engine.legal_actions():
        clone = make_play_engine(2)
        put_settlement(clone, 0, corner(clone, 0, 0, 0))
        put_road(clone, 0, side(clone, 0, 0, 0))
        give(clone, 0, wood=2, brick=2, sheep=1, wheat=2, ore=3)
        clone.apply(action)
