"""État d'une partie.

Ce module définit les données d'une partie: plateau, joueurs, phases, pioche
et titres. Il ne contient aucune règle de transition: seul
`catan.engine.engine.RulesEngine` modifie un `GameState`.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set, Tuple

from catan.engine.board import Board, Building
from catan.engine.rules import (
    DEFAULT_DEV_DECK,
    DEV_CARD_TYPES,
    MAX_CITIES_PER_PLAYER,
    MAX_ROADS_PER_PLAYER,
    MAX_SETTLEMENTS_PER_PLAYER,
    RESOURCE_TYPES,
    VICTORY_POINT,
    RulesConfig,
)

MIN_PLAYERS = 2
MAX_PLAYERS = 4


def empty_resources() -> Dict[str, int]:
    return {resource: 0 for resource in RESOURCE_TYPES}


def empty_dev_cards() -> Dict[str, int]:
    return {card: 0 for card in DEV_CARD_TYPES}


@dataclass
class Player:
    """Représentation d'un joueur."""

    player_id: int
    name: str
    resources: Dict[str, int] = field(default_factory=empty_resources)
    settlements: List[int] = field(default_factory=list)  # node_ids
    cities: List[int] = field(default_factory=list)  # node_ids
    roads: List[int] = field(default_factory=list)  # edge_ids
    # Cartes jouables (achetées lors d'un tour précédent)
    dev_cards: Dict[str, int] = field(default_factory=empty_dev_cards)
    # Cartes achetées pendant le tour courant
    new_dev_cards: Dict[str, int] = field(default_factory=empty_dev_cards)
    knights_played: int = 0
    victory_points: int = 0
    public_victory_points: int = 0

    @property
    def total_resources(self) -> int:
        return sum(self.resources.values())

    @property
    def victory_point_cards(self) -> int:
        return self.dev_cards.get(VICTORY_POINT, 0) + self.new_dev_cards.get(VICTORY_POINT, 0)

    def buildings_remaining(self) -> Dict[str, int]:
        return {
            "settlements": MAX_SETTLEMENTS_PER_PLAYER - len(self.settlements),
            "cities": MAX_CITIES_PER_PLAYER - len(self.cities),
            "roads": MAX_ROADS_PER_PLAYER - len(self.roads),
        }

    def can_afford(self, cost: Dict[str, int]) -> bool:
        return all(self.resources.get(resource, 0) >= amount for resource, amount in cost.items())


@dataclass
class DevelopmentDeck:
    """Pioche mélangée avec curseur: les cartes tirées ne reviennent jamais."""

    cards: List[str] = field(default_factory=list)
    position: int = 0

    @classmethod
    def shuffled(cls, rng: random.Random, cards: Sequence[str] = DEFAULT_DEV_DECK) -> "DevelopmentDeck":
        deck = list(cards)
        rng.shuffle(deck)
        return cls(cards=deck)

    @property
    def remaining(self) -> int:
        return len(self.cards) - self.position

    def peek(self) -> Optional[str]:
        return self.cards[self.position] if self.remaining > 0 else None

    def draw(self) -> str:
        if self.remaining <= 0:
            raise IndexError("pioche vide")
        card = self.cards[self.position]
        self.position += 1
        return card


@dataclass(frozen=True)
class PendingTrade:
    """Offre d'échange joueur↔joueur en attente de réponse."""

    trade_id: int
    proposer_id: int
    target_id: int
    give: Dict[str, int]
    receive: Dict[str, int]
    created_turn: int
    expires_at_turn: int


class GamePhase(Enum):
    """Phases de la partie."""

    SETUP = "setup"
    MAIN_GAME = "main_game"
    GAME_OVER = "game_over"


class TurnPhase(Enum):
    """Sous-phases d'un tour en phase MAIN_GAME."""

    DICE_ROLL = "dice_roll"
    ROBBER_PLACEMENT = "robber_placement"
    DISCARD_CARDS = "discard_cards"
    ACTIONS = "actions"


@dataclass
class GameState:
    """État complet d'une partie (données pures)."""

    board: Board
    players: List[Player]
    config: RulesConfig = field(default_factory=RulesConfig)
    phase: GamePhase = GamePhase.SETUP
    turn_phase: TurnPhase = TurnPhase.DICE_ROLL
    current_player_index: int = 0
    turn_number: int = 0
    setup_round: int = 1
    setup_direction: int = 1
    # Sommet de la colonie de setup en attente de sa route
    setup_pending_node: int | None = None
    last_roll: Tuple[int, int] | None = None
    pending_discards: Dict[int, int] = field(default_factory=dict)
    dev_card_played_this_turn: bool = False
    development_deck: DevelopmentDeck = field(default_factory=DevelopmentDeck)
    pending_trades: Dict[int, PendingTrade] = field(default_factory=dict)
    next_trade_id: int = 1
    longest_road_owner: int | None = None
    longest_road_length: int = 0
    largest_army_owner: int | None = None
    largest_army_size: int = 0
    winner_id: int | None = None

    @classmethod
    def new_game(
        cls,
        player_names: Sequence[str] | None = None,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
        board: Board | None = None,
        dev_deck: Sequence[str] | None = None,
        config: RulesConfig | None = None,
    ) -> "GameState":
        """Crée une partie en phase SETUP.

        Args:
            player_names: Noms des joueurs, 2 à 4 (par défaut 4 joueurs)
            seed: Graine utilisée si aucun `rng` n'est fourni
            rng: Générateur pour le plateau et la pioche
            board: Plateau imposé (sinon généré aléatoirement)
            dev_deck: Ordre imposé de la pioche de développement (non mélangé)
            config: Paramètres de variante

        Returns:
            État initial, joueur 0 à placer sa première colonie
        """

        if player_names is None:
            player_names = [f"Player {i}" for i in range(MAX_PLAYERS)]
        if not MIN_PLAYERS <= len(player_names) <= MAX_PLAYERS:
            raise ValueError(
                f"Une partie compte {MIN_PLAYERS} à {MAX_PLAYERS} joueurs (reçu: {len(player_names)})"
            )

        config = config or RulesConfig()
        rng = rng or random.Random(seed)
        if board is None:
            board = Board.generate(rng, hex_size=config.hex_size)

        if dev_deck is None:
            deck = DevelopmentDeck.shuffled(rng)
        else:
            deck = DevelopmentDeck(cards=list(dev_deck))

        players = [Player(player_id=i, name=name) for i, name in enumerate(player_names)]
        return cls(board=board, players=players, config=config, development_deck=deck)

    # -- Requêtes --
    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def robber_tile_id(self) -> int:
        return self.board.robber_tile_id

    def node_owner(self, node_id: int) -> int | None:
        return self.board.nodes[node_id].owner

    def node_building(self, node_id: int) -> Building | None:
        return self.board.nodes[node_id].building

    def player_ports(self, player_id: int) -> Set[str]:
        """Types de ports accessibles via une colonie/ville du joueur."""

        kinds: Set[str] = set()
        for node in self.board.nodes:
            if node.owner == player_id and node.port is not None:
                kinds.add(node.port)
        return kinds

    def players_on_tile(self, tile_id: int) -> List[int]:
        """Propriétaires (triés) de constructions adjacentes à une tuile."""

        owners = {
            self.board.nodes[node_id].owner
            for node_id in self.board.tiles[tile_id].node_ids
        }
        return sorted(owner for owner in owners if owner is not None)


__all__ = [
    "GameState",
    "Player",
    "DevelopmentDeck",
    "PendingTrade",
    "GamePhase",
    "TurnPhase",
    "empty_resources",
    "empty_dev_cards",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
]
