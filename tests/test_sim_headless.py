"""Tests de l'environnement headless et des politiques de base."""

from __future__ import annotations

import pytest

from catan.engine.actions import PlaceInitialSettlement, RollDice
from catan.engine.errors import RulesError
from catan.engine.rules import BUILDING_LIMITS
from catan.engine.state import GamePhase
from catan.sim.policies import AgentPolicy, FirstLegalPolicy, RandomLegalPolicy
from catan.sim.runner import HeadlessEnv


def test_env_requires_reset():
    with pytest.raises(RuntimeError):
        HeadlessEnv().state


def test_reset_and_step():
    env = HeadlessEnv(seed=3, player_count=3)
    state = env.reset()
    assert len(state.players) == 3
    assert state.phase == GamePhase.SETUP

    action = env.legal_actions()[0]
    assert isinstance(action, PlaceInitialSettlement)
    result = env.step(action)

    assert result.done is False
    assert result.reward == (0.0, 0.0, 0.0)
    assert result.info["last_action"] == action
    assert len(result.info["events"]) == 1


def test_step_rejects_illegal_action():
    env = HeadlessEnv(seed=3)
    env.reset()
    with pytest.raises(RulesError):
        env.step(RollDice())


def test_reset_is_reproducible():
    first = HeadlessEnv().reset(seed=10)
    second = HeadlessEnv().reset(seed=10)
    assert first == second


def test_policies_need_legal_actions():
    with pytest.raises(ValueError):
        FirstLegalPolicy().select_action(None, [])
    with pytest.raises(ValueError):
        RandomLegalPolicy(seed=0).select_action(None, [])
    with pytest.raises(NotImplementedError):
        AgentPolicy().select_action(None, [])
    assert AgentPolicy(name="custom").name == "custom"


def test_random_rollout_preserves_invariants():
    """Rollout aléatoire: les invariants de l'état tiennent après chaque commande."""

    env = HeadlessEnv(seed=21, player_count=4)
    state = env.reset()
    policy = RandomLegalPolicy(seed=21)

    for _ in range(400):
        result = env.step(policy.select_action(state, env.legal_actions()))
        state = result.state

        robbers = [tile.tile_id for tile in state.board.tiles if tile.has_robber]
        assert robbers == [state.board.robber_tile_id]
        for player in state.players:
            assert all(count >= 0 for count in player.resources.values())
            assert len(player.settlements) <= BUILDING_LIMITS["settlements"]
            assert len(player.cities) <= BUILDING_LIMITS["cities"]
            assert len(player.roads) <= BUILDING_LIMITS["roads"]
            owned_edges = [edge.edge_id for edge in state.board.edges if edge.owner == player.player_id]
            assert sorted(owned_edges) == sorted(player.roads)
        if result.done:
            assert state.winner_id is not None
            break
