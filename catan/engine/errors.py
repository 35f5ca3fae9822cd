"""Erreurs levées par le moteur de règles.

Toutes dérivent de `RulesError` (elle-même un `ValueError`, comme l'ancien
contrat « Action illégale »). Ce sont des erreurs d'appelant: aucune n'est
transitoire et une commande rejetée ne modifie jamais l'état.
"""

from __future__ import annotations


class RulesError(ValueError):
    """Commande refusée par le moteur."""


class InvalidPhase(RulesError):
    """Commande non autorisée dans la phase / sous-phase courante."""


class GameOver(InvalidPhase):
    """La partie est terminée: l'état est en lecture seule."""


class NotCurrentPlayer(RulesError):
    """Le joueur n'est pas celui dont le moteur attend l'action."""


class IllegalPlacement(RulesError):
    """Règle de distance, connexité ou emplacement déjà occupé."""


class InsufficientResources(RulesError):
    """Le joueur ne possède pas les ressources requises."""


class BuildingLimitReached(RulesError):
    """Plus aucune pièce de ce type disponible pour le joueur."""


class InvalidTarget(RulesError):
    """Cible invalide (tuile du voleur, échange avec soi-même, identifiant inconnu...)."""


class CardNotHeld(RulesError):
    """Carte jouée ou défaussée absente de la main du joueur."""


class DeckEmpty(RulesError):
    """La pioche de développement est vide."""


class UnknownAction(RulesError):
    """Objet commande non reconnu par le moteur."""


__all__ = [
    "RulesError",
    "InvalidPhase",
    "GameOver",
    "NotCurrentPlayer",
    "IllegalPlacement",
    "InsufficientResources",
    "BuildingLimitReached",
    "InvalidTarget",
    "CardNotHeld",
    "DeckEmpty",
    "UnknownAction",
]
