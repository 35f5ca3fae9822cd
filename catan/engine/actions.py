"""Commandes acceptées par le moteur.

Chaque commande est une valeur immuable; `RulesEngine.apply` la route vers son
gestionnaire. `player_id` désigne l'acteur: facultatif pour les commandes du
joueur courant (le moteur vérifie alors qu'il s'agit bien de lui),
obligatoire pour les défausses et les réponses aux offres d'échange.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class Action:
    """Action de base."""

    pass


@dataclass(frozen=True)
class PlaceInitialSettlement(Action):
    """Colonie gratuite de la phase de setup."""

    node_id: int
    player_id: int | None = None


@dataclass(frozen=True)
class PlaceInitialRoad(Action):
    """Route gratuite de setup, adjacente à la colonie qui vient d'être posée."""

    edge_id: int
    player_id: int | None = None


@dataclass(frozen=True)
class RollDice(Action):
    """Lance les dés.

    Args:
        forced: Valeurs imposées (d1, d2), pour les tests et le rejeu
    """

    forced: Tuple[int, int] | None = None
    player_id: int | None = None


@dataclass(frozen=True)
class DiscardCards(Action):
    """Défausse après un 7."""

    player_id: int
    resources: Dict[str, int]


@dataclass(frozen=True)
class MoveRobber(Action):
    """Déplace le voleur et vole éventuellement une carte à `victim_id`."""

    tile_id: int
    victim_id: int | None = None
    player_id: int | None = None


@dataclass(frozen=True)
class BuildSettlement(Action):
    node_id: int
    player_id: int | None = None


@dataclass(frozen=True)
class BuildCity(Action):
    node_id: int
    player_id: int | None = None


@dataclass(frozen=True)
class BuildRoad(Action):
    edge_id: int
    player_id: int | None = None


@dataclass(frozen=True)
class BuyDevelopmentCard(Action):
    player_id: int | None = None


@dataclass(frozen=True)
class PlayKnight(Action):
    """Joue un chevalier: déplacement du voleur inclus."""

    tile_id: int
    victim_id: int | None = None
    player_id: int | None = None


@dataclass(frozen=True)
class PlayRoadBuilding(Action):
    """Construit 1 ou 2 routes gratuites, évaluées dans l'ordre donné."""

    edge_ids: Tuple[int, ...]
    player_id: int | None = None


@dataclass(frozen=True)
class PlayMonopoly(Action):
    resource: str
    player_id: int | None = None


@dataclass(frozen=True)
class PlayYearOfPlenty(Action):
    """Prend exactement deux ressources à la banque (doublons autorisés)."""

    resources: Tuple[str, ...]
    player_id: int | None = None


@dataclass(frozen=True)
class TradeWithBank(Action):
    """Échange 4:1 avec la banque."""

    give: str
    receive: str
    player_id: int | None = None


@dataclass(frozen=True)
class TradeWithPort(Action):
    """Échange au meilleur taux disponible (2:1, 3:1, sinon 4:1)."""

    give: str
    receive: str
    player_id: int | None = None


@dataclass(frozen=True)
class ProposeTrade(Action):
    target_id: int
    give: Dict[str, int]
    receive: Dict[str, int]
    player_id: int | None = None


@dataclass(frozen=True)
class AcceptTrade(Action):
    trade_id: int
    player_id: int


@dataclass(frozen=True)
class RejectTrade(Action):
    trade_id: int
    player_id: int


@dataclass(frozen=True)
class CancelTrade(Action):
    trade_id: int
    player_id: int


@dataclass(frozen=True)
class EndTurn(Action):
    """Termine le tour du joueur actuel."""

    player_id: int | None = None


__all__ = [
    "Action",
    "PlaceInitialSettlement",
    "PlaceInitialRoad",
    "RollDice",
    "DiscardCards",
    "MoveRobber",
    "BuildSettlement",
    "BuildCity",
    "BuildRoad",
    "BuyDevelopmentCard",
    "PlayKnight",
    "PlayRoadBuilding",
    "PlayMonopoly",
    "PlayYearOfPlenty",
    "TradeWithBank",
    "TradeWithPort",
    "ProposeTrade",
    "AcceptTrade",
    "RejectTrade",
    "CancelTrade",
    "EndTurn",
]
