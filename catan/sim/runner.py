"""Boucle headless pour le moteur Catane.

Environnement minimaliste `reset()` / `step()` au-dessus d'un `RulesEngine`,
utilisé pour les rollouts de fumée et la simulation parallèle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from catan.engine.actions import Action
from catan.engine.engine import RulesEngine
from catan.engine.rules import RulesConfig
from catan.engine.state import MAX_PLAYERS, GameState


@dataclass(frozen=True)
class StepResult:
    """Résultat d'un appel à HeadlessEnv.step()."""

    state: GameState
    reward: Tuple[float, ...]
    done: bool
    info: Dict[str, Any]


class HeadlessEnv:
    """Environnement headless léger pour le moteur Catane."""

    def __init__(
        self,
        *,
        seed: int | None = None,
        player_count: int = MAX_PLAYERS,
        config: RulesConfig | None = None,
    ) -> None:
        self._base_seed = seed
        self._player_count = player_count
        self._config = config
        self._engine: RulesEngine | None = None

    @property
    def engine(self) -> RulesEngine:
        if self._engine is None:
            raise RuntimeError("reset() doit être appelé avant d'accéder au moteur")
        return self._engine

    @property
    def state(self) -> GameState:
        """Retourne l'état courant (reset doit avoir été appelé)."""

        return self.engine.state

    def reset(
        self,
        *,
        seed: int | None = None,
        player_names: Sequence[str] | None = None,
    ) -> GameState:
        """Réinitialise l'environnement et renvoie l'état initial."""

        effective_seed = seed if seed is not None else self._base_seed
        if player_names is None:
            player_names = [f"Player {i}" for i in range(self._player_count)]
        self._engine = RulesEngine.new_game(
            player_names,
            seed=effective_seed,
            config=self._config,
        )
        return self._engine.state

    def legal_actions(self) -> List[Action]:
        """Retourne les actions légales de l'état courant."""

        return self.engine.legal_actions()

    def step(self, action: Action) -> StepResult:
        """Applique une action et renvoie le résultat.

        Une action illégale lève une `RulesError`.
        """

        engine = self.engine
        result = engine.apply(action)
        engine.drain_events()

        state = engine.state
        done = state.is_game_over
        reward = tuple(
            1.0 if done and player.player_id == state.winner_id else 0.0
            for player in state.players
        )
        info = {"last_action": action, "events": result.events}
        return StepResult(state=state, reward=reward, done=done, info=info)


__all__ = ["HeadlessEnv", "StepResult"]
