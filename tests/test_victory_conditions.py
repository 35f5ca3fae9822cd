"""Tests de fin de partie: seuil de points, phase terminale, ordre de victoire."""

from __future__ import annotations

import pytest

from catan.engine.errors import GameOver, InvalidPhase
from catan.engine.events import GameWon
from catan.engine.rules import VICTORY_POINT
from catan.engine.state import GamePhase

from .builders import corner, give, make_play_engine, put_road, put_settlement, side


def _near_win_engine(threshold=3):
    engine = make_play_engine(2, victory_points_to_win=threshold, dev_deck=[VICTORY_POINT])
    put_settlement(engine, 0, corner(engine, 0, 0, 0))
    put_settlement(engine, 0, corner(engine, 0, -2, 5))
    put_road(engine, 0, side(engine, 0, 0, 0))
    put_road(engine, 0, side(engine, 0, 0, 1))
    return engine


def test_game_ends_when_threshold_reached():
    engine = _near_win_engine()
    give(engine, 0, wood=1, brick=1, sheep=1, wheat=1)

    result = engine.build_settlement(corner(engine, 0, 0, 2))

    state = engine.state
    assert state.phase == GamePhase.GAME_OVER
    assert state.is_game_over
    assert state.winner_id == 0
    assert result.events[-1] == GameWon(winner_id=0, victory_points=3, standings=(3, 0))


def test_hidden_victory_point_card_wins():
    engine = _near_win_engine()
    give(engine, 0, ore=1, sheep=1, wheat=1)

    engine.buy_development_card()

    assert engine.state.winner_id == 0
    assert engine.state.players[0].public_victory_points == 2


def test_game_over_state_is_frozen():
    engine = _near_win_engine()
    give(engine, 0, ore=1, sheep=1, wheat=1, wood=1, brick=1)
    engine.buy_development_card()
    snapshot = engine.get_state()

    with pytest.raises(GameOver):
        engine.end_turn()
    with pytest.raises(InvalidPhase):
        engine.build_road(side(engine, 0, 0, 2))
    assert engine.legal_actions() == []
    assert engine.get_state() == snapshot


def test_below_threshold_keeps_playing():
    engine = _near_win_engine(threshold=4)
    give(engine, 0, wood=1, brick=1, sheep=1, wheat=1)
    engine.build_settlement(corner(engine, 0, 0, 2))
    assert engine.state.phase == GamePhase.MAIN_GAME
    assert engine.state.winner_id is None


def test_end_turn_checks_every_player():
    """Un joueur hors tour au-dessus du seuil est déclaré vainqueur à la fin du tour."""

    engine = make_play_engine(2, victory_points_to_win=3)
    for index in range(3):
        engine.state.players[1].settlements.append(100 + index)

    engine.end_turn()

    assert engine.state.winner_id == 1
