"""Service d'orchestration d'une partie Catane (2 à 4 joueurs)."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from catan.app.event_bus import EventBus
from catan.app.events import ActionAppliedEvent, GameEndedEvent, GameStartedEvent
from catan.engine.actions import Action
from catan.engine.board import Board
from catan.engine.engine import RulesEngine
from catan.engine.rules import RulesConfig
from catan.engine.state import GameState
from catan.log import get_logger

logger = get_logger(__name__)


class GameService:
    """Wrappe un `RulesEngine` et publie ses évènements sur un `EventBus`."""

    def __init__(self, *, event_bus: EventBus | None = None) -> None:
        self._event_bus = event_bus or EventBus()
        self._engine: RulesEngine | None = None

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def engine(self) -> RulesEngine:
        if self._engine is None:
            raise RuntimeError("Aucune partie initialisée. Utiliser start_new_game().")
        return self._engine

    @property
    def state(self) -> GameState:
        """État courant de la partie (erreur si aucune partie lancée)."""

        return self.engine.state

    def start_new_game(
        self,
        player_names: Sequence[str] | None = None,
        *,
        seed: int | None = None,
        dev_deck: Iterable[str] | None = None,
        board: Board | None = None,
        config: RulesConfig | None = None,
    ) -> GameState:
        """Initialise une nouvelle partie et publie l'évènement associé."""

        self._engine = RulesEngine.new_game(
            list(player_names) if player_names is not None else None,
            seed=seed,
            board=board,
            dev_deck=list(dev_deck) if dev_deck is not None else None,
            config=config,
        )
        state = self._engine.get_state()
        logger.info("game_started", players=len(state.players), seed=seed)
        self._event_bus.publish(GameStartedEvent(state=state))
        return self._engine.state

    def legal_actions(self) -> List[Action]:
        """Retourne les actions légales pour l'état courant."""

        return self.engine.legal_actions()

    def dispatch(self, action: Action) -> GameState:
        """Valide et applique une commande, puis notifie les observateurs.

        Une commande refusée lève une `RulesError` (sous-classe de
        `ValueError`) et ne publie rien.
        """

        engine = self.engine
        previous_state = engine.get_state()
        engine.apply(action)

        for event in engine.drain_events():
            self._event_bus.publish(event)

        new_state = engine.get_state()
        self._event_bus.publish(
            ActionAppliedEvent(
                action=action,
                previous_state=previous_state,
                new_state=new_state,
            )
        )

        if new_state.is_game_over:
            self._event_bus.publish(GameEndedEvent(state=new_state, winner_id=new_state.winner_id))

        return engine.state
