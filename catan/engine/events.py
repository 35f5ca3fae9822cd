"""Évènements de domaine émis par le moteur après chaque commande validée.

Le moteur les accumule dans une boîte d'envoi que l'appelant vide
(`RulesEngine.drain_events`); il ne connaît aucun mécanisme de diffusion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class DomainEvent:
    pass


@dataclass(frozen=True)
class SettlementPlaced(DomainEvent):
    player_id: int
    node_id: int
    initial: bool = False


@dataclass(frozen=True)
class CityBuilt(DomainEvent):
    player_id: int
    node_id: int


@dataclass(frozen=True)
class RoadPlaced(DomainEvent):
    player_id: int
    edge_id: int
    initial: bool = False
    free: bool = False


@dataclass(frozen=True)
class SetupCompleted(DomainEvent):
    first_player_id: int


@dataclass(frozen=True)
class DiceRolled(DomainEvent):
    player_id: int
    die1: int
    die2: int
    total: int


@dataclass(frozen=True)
class ResourcesGranted(DomainEvent):
    """Ressources reçues par joueur (production, setup, Year of Plenty)."""

    grants: Dict[int, Dict[str, int]]
    reason: str


@dataclass(frozen=True)
class DiscardRequired(DomainEvent):
    requirements: Dict[int, int]


@dataclass(frozen=True)
class CardsDiscarded(DomainEvent):
    player_id: int
    resources: Dict[str, int]


@dataclass(frozen=True)
class RobberMoved(DomainEvent):
    player_id: int
    tile_id: int
    victim_id: int | None = None


@dataclass(frozen=True)
class ResourceStolen(DomainEvent):
    thief_id: int
    victim_id: int
    resource: str | None


@dataclass(frozen=True)
class DevelopmentCardBought(DomainEvent):
    player_id: int
    card: str


@dataclass(frozen=True)
class DevelopmentCardPlayed(DomainEvent):
    player_id: int
    card: str


@dataclass(frozen=True)
class MonopolyCollected(DomainEvent):
    player_id: int
    resource: str
    taken: Dict[int, int]


@dataclass(frozen=True)
class MaritimeTrade(DomainEvent):
    player_id: int
    give: str
    give_amount: int
    receive: str
    ratio: int


@dataclass(frozen=True)
class TradeProposed(DomainEvent):
    trade_id: int
    proposer_id: int
    target_id: int
    give: Dict[str, int]
    receive: Dict[str, int]


@dataclass(frozen=True)
class TradeAccepted(DomainEvent):
    trade_id: int
    proposer_id: int
    target_id: int


@dataclass(frozen=True)
class TradeRejected(DomainEvent):
    trade_id: int
    target_id: int


@dataclass(frozen=True)
class TradeCancelled(DomainEvent):
    trade_id: int
    proposer_id: int


@dataclass(frozen=True)
class TradeExpired(DomainEvent):
    trade_id: int


@dataclass(frozen=True)
class LongestRoadChanged(DomainEvent):
    previous_owner: int | None
    new_owner: int | None
    length: int


@dataclass(frozen=True)
class LargestArmyChanged(DomainEvent):
    previous_owner: int | None
    new_owner: int | None
    size: int


@dataclass(frozen=True)
class TurnEnded(DomainEvent):
    player_id: int
    next_player_id: int
    turn_number: int


@dataclass(frozen=True)
class GameWon(DomainEvent):
    winner_id: int
    victory_points: int
    standings: Tuple[int, ...]


__all__ = [
    "DomainEvent",
    "SettlementPlaced",
    "CityBuilt",
    "RoadPlaced",
    "SetupCompleted",
    "DiceRolled",
    "ResourcesGranted",
    "DiscardRequired",
    "CardsDiscarded",
    "RobberMoved",
    "ResourceStolen",
    "DevelopmentCardBought",
    "DevelopmentCardPlayed",
    "MonopolyCollected",
    "MaritimeTrade",
    "TradeProposed",
    "TradeAccepted",
    "TradeRejected",
    "TradeCancelled",
    "TradeExpired",
    "LongestRoadChanged",
    "LargestArmyChanged",
    "TurnEnded",
    "GameWon",
]
