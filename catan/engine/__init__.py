"""Moteur de règles Catane: plateau, état, commandes et évènements."""

from . import rules  # re-export for convenience
from .board import Board, Building
from .engine import CommandResult, RulesEngine
from .errors import RulesError
from .state import GamePhase, GameState, TurnPhase
from .trading import TradingRules

__all__ = [
    "rules",
    "Board",
    "Building",
    "CommandResult",
    "RulesEngine",
    "RulesError",
    "GamePhase",
    "GameState",
    "TurnPhase",
    "TradingRules",
]
