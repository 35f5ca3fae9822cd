"""Services d'application pour orchestrer le moteur Catane."""

from .event_bus import EventBus
from .events import ActionAppliedEvent, GameEndedEvent, GameStartedEvent
from .game_service import GameService

__all__ = [
    "EventBus",
    "GameService",
    "GameStartedEvent",
    "ActionAppliedEvent",
    "GameEndedEvent",
]
