"""Politiques de base pour la simulation headless."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from catan.engine.actions import Action
from catan.engine.state import GameState


class AgentPolicy:
    """Interface minimale utilisée par la simulation headless."""

    def __init__(self, *, name: str | None = None) -> None:
        self._name = name or self.__class__.__name__

    @property
    def name(self) -> str:
        return self._name

    def select_action(self, state: GameState, legal: Sequence[Action]) -> Action:
        raise NotImplementedError


class RandomLegalPolicy(AgentPolicy):
    """Politique uniformément aléatoire sur les actions légales."""

    def __init__(
        self,
        *,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(name="RandomLegal")
        self._random = rng or random.Random(seed)

    def select_action(self, state: GameState, legal: Sequence[Action]) -> Action:
        if not legal:
            raise ValueError("Aucune action légale disponible pour RandomLegalPolicy")
        return self._random.choice(list(legal))


class FirstLegalPolicy(AgentPolicy):
    """Politique déterministe retournant la première action légale disponible."""

    def __init__(self) -> None:
        super().__init__(name="FirstLegal")

    def select_action(self, state: GameState, legal: Sequence[Action]) -> Action:
        if not legal:
            raise ValueError("Aucune action légale disponible pour FirstLegalPolicy")
        return legal[0]


__all__ = ["AgentPolicy", "RandomLegalPolicy", "FirstLegalPolicy"]
