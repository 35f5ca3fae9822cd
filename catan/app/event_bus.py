"""Bus d'évènements minimaliste pour la couche application."""

from __future__ import annotations

from typing import Callable, List

Subscriber = Callable[[object], None]


class EventBus:
    """Publie des évènements aux observateurs enregistrés.

    Diffusion synchrone: chaque publication appelle immédiatement les abonnés
    dans l'ordre d'enregistrement. Une exception levée par un abonné
    interrompt la diffusion et remonte à l'appelant.
    """

    __slots__ = ("_subscribers",)

    def __init__(self) -> None:
        self._subscribers: List[Subscriber] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Enregistre un abonné et retourne une fonction de désinscription."""

        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: object) -> None:
        """Diffuse l'évènement à tous les abonnés courants."""

        # Copie: un abonné peut se désinscrire pendant la diffusion
        for callback in list(self._subscribers):
            callback(event)
