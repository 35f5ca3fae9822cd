"""Tests du commerce maritime: banque 4:1, ports 3:1 et 2:1."""

from __future__ import annotations

import pytest

from catan.engine.board import GENERIC
from catan.engine.errors import InsufficientResources, InvalidPhase, InvalidTarget
from catan.engine.events import MaritimeTrade
from catan.engine.rules import BRICK, ORE, SHEEP, WHEAT, WOOD
from catan.engine.state import TurnPhase
from catan.engine.trading import TradingRules

from .builders import give, make_play_engine, put_settlement


def _port_node(engine, kind):
    port = next(port for port in engine.state.board.ports if port.kind == kind)
    return port.nodes[0]


def test_bank_trade_four_to_one(play_engine):
    give(play_engine, 0, wood=5)

    result = play_engine.trade_with_bank(WOOD, ORE)

    hand = play_engine.state.players[0].resources
    assert hand[WOOD] == 1
    assert hand[ORE] == 1
    assert result.events == (
        MaritimeTrade(player_id=0, give=WOOD, give_amount=4, receive=ORE, ratio=4),
    )


def test_bank_trade_validation(play_engine):
    give(play_engine, 0, wood=3)
    with pytest.raises(InsufficientResources):
        play_engine.trade_with_bank(WOOD, ORE)
    give(play_engine, 0, wood=1)
    with pytest.raises(InvalidTarget):
        play_engine.trade_with_bank(WOOD, WOOD)
    with pytest.raises(InvalidTarget):
        play_engine.trade_with_bank(WOOD, "gold")


def test_bank_trade_requires_actions_phase():
    engine = make_play_engine(2, turn_phase=TurnPhase.DICE_ROLL)
    give(engine, 0, wood=4)
    with pytest.raises(InvalidPhase):
        engine.trade_with_bank(WOOD, ORE)


def test_special_port_ratio():
    """Port bois: le bois s'échange à 2:1, la brique reste à 4:1."""

    engine = make_play_engine(2)
    put_settlement(engine, 0, _port_node(engine, WOOD))

    assert TradingRules.best_ratio(engine.state, 0, WOOD) == 2
    assert TradingRules.best_ratio(engine.state, 0, BRICK) == 4
    assert TradingRules.best_ratio(engine.state, 1, WOOD) == 4

    give(engine, 0, wood=2)
    result = engine.trade_with_port(WOOD, WHEAT)
    assert engine.state.players[0].resources[WOOD] == 0
    assert engine.state.players[0].resources[WHEAT] == 1
    assert result.events[0].ratio == 2


def test_generic_port_ratio():
    engine = make_play_engine(2)
    put_settlement(engine, 0, _port_node(engine, GENERIC))

    assert TradingRules.best_ratio(engine.state, 0, SHEEP) == 3
    give(engine, 0, sheep=3)
    engine.trade_with_port(SHEEP, ORE)
    assert engine.state.players[0].resources[SHEEP] == 0
    assert engine.state.players[0].resources[ORE] == 1


def test_city_on_port_counts():
    engine = make_play_engine(2)
    put_settlement(engine, 0, _port_node(engine, ORE), city=True)
    assert TradingRules.best_ratio(engine.state, 0, ORE) == 2


def test_port_trade_without_port_uses_bank_ratio(play_engine):
    give(play_engine, 0, brick=3)
    with pytest.raises(InsufficientResources):
        play_engine.trade_with_port(BRICK, ORE)
    give(play_engine, 0, brick=1)
    result = play_engine.trade_with_port(BRICK, ORE)
    assert result.events[0].ratio == 4
