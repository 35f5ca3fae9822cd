"""Évènements publiés par la couche application (`catan.app`).

Les évènements de domaine du moteur (`catan.engine.events`) sont publiés tels
quels sur le même bus, avant `ActionAppliedEvent`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from catan.engine.actions import Action
from catan.engine.state import GameState


@dataclass(frozen=True)
class GameStartedEvent:
    """Émis lorsqu'une nouvelle partie est initialisée."""

    state: GameState


@dataclass(frozen=True)
class ActionAppliedEvent:
    """Émis après qu'une commande légale a été appliquée."""

    action: Action
    previous_state: GameState
    new_state: GameState


@dataclass(frozen=True)
class GameEndedEvent:
    """Émis quand la partie passe en phase GAME_OVER."""

    state: GameState
    winner_id: Optional[int]
