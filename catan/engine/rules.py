"""Règles et constantes du jeu standard (3-4 joueurs).

Ce module expose:
- les types de ressources et de cartes de développement
- les coûts de construction `COSTS` et les limites de pièces `BUILDING_LIMITS`
- la configuration de variante `RulesConfig`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

WOOD = "wood"
BRICK = "brick"
SHEEP = "sheep"
WHEAT = "wheat"
ORE = "ore"
DESERT = "desert"

RESOURCE_TYPES: Tuple[str, ...] = (WOOD, BRICK, SHEEP, WHEAT, ORE)

KNIGHT = "knight"
VICTORY_POINT = "victory_point"
ROAD_BUILDING = "road_building"
YEAR_OF_PLENTY = "year_of_plenty"
MONOPOLY = "monopoly"

DEV_CARD_TYPES: Tuple[str, ...] = (
    KNIGHT,
    VICTORY_POINT,
    ROAD_BUILDING,
    YEAR_OF_PLENTY,
    MONOPOLY,
)
PROGRESS_CARD_TYPES: Tuple[str, ...] = (ROAD_BUILDING, YEAR_OF_PLENTY, MONOPOLY)

DEFAULT_DEV_DECK: Tuple[str, ...] = (
    (KNIGHT,) * 14
    + (VICTORY_POINT,) * 5
    + (ROAD_BUILDING,) * 2
    + (YEAR_OF_PLENTY,) * 2
    + (MONOPOLY,) * 2
)

# Sac de tuiles et de jetons du plateau standard
TILE_BAG: Dict[str, int] = {
    WOOD: 4,
    BRICK: 3,
    SHEEP: 4,
    WHEAT: 4,
    ORE: 3,
    DESERT: 1,
}
TOKEN_BAG: Tuple[int, ...] = (2, 3, 3, 4, 4, 5, 5, 6, 6, 8, 8, 9, 9, 10, 10, 11, 11, 12)

# Variante standard
VP_TO_WIN: int = 10
DISCARD_LIMIT: int = 7
LONGEST_ROAD_MIN: int = 5
LARGEST_ARMY_MIN: int = 3
BANK_TRADE_RATIO: int = 4
GENERIC_PORT_RATIO: int = 3
SPECIAL_PORT_RATIO: int = 2

# Limites de pièces par joueur
MAX_SETTLEMENTS_PER_PLAYER: int = 5
MAX_CITIES_PER_PLAYER: int = 4
MAX_ROADS_PER_PLAYER: int = 15

BUILDING_LIMITS: Dict[str, int] = {
    "settlements": MAX_SETTLEMENTS_PER_PLAYER,
    "cities": MAX_CITIES_PER_PLAYER,
    "roads": MAX_ROADS_PER_PLAYER,
}

COSTS: Dict[str, Dict[str, int]] = {
    "road": {WOOD: 1, BRICK: 1},
    "settlement": {WOOD: 1, BRICK: 1, SHEEP: 1, WHEAT: 1},
    "city": {WHEAT: 2, ORE: 3},
    "development": {ORE: 1, SHEEP: 1, WHEAT: 1},
}

# Probabilités 2d6
DICE_PROBABILITIES: Dict[int, float] = {
    total: (6 - abs(total - 7)) / 36 for total in range(2, 13)
}


def pip_count(token: int | None) -> int:
    """Nombre de combinaisons 2d6 produisant ``token`` (0 pour le désert)."""

    if token is None or token == 7:
        return 0
    return 6 - abs(token - 7)


@dataclass(frozen=True)
class RulesConfig:
    """Paramètres de variante injectés dans l'état et le moteur."""

    victory_points_to_win: int = VP_TO_WIN
    discard_limit: int = DISCARD_LIMIT
    longest_road_min: int = LONGEST_ROAD_MIN
    largest_army_min: int = LARGEST_ARMY_MIN
    # False: une égalité ne fait jamais changer de main un titre
    transfer_award_on_tie: bool = False
    trade_offer_ttl_turns: int = 1
    hex_size: int = 48

    def __post_init__(self) -> None:
        if self.victory_points_to_win <= 0:
            raise ValueError("victory_points_to_win doit être strictement positif")
        if self.trade_offer_ttl_turns <= 0:
            raise ValueError("trade_offer_ttl_turns doit être strictement positif")
        if self.hex_size < 8:
            raise ValueError("hex_size trop petit pour quantifier les sommets")


__all__ = [
    "WOOD",
    "BRICK",
    "SHEEP",
    "WHEAT",
    "ORE",
    "DESERT",
    "RESOURCE_TYPES",
    "KNIGHT",
    "VICTORY_POINT",
    "ROAD_BUILDING",
    "YEAR_OF_PLENTY",
    "MONOPOLY",
    "DEV_CARD_TYPES",
    "PROGRESS_CARD_TYPES",
    "DEFAULT_DEV_DECK",
    "TILE_BAG",
    "TOKEN_BAG",
    "VP_TO_WIN",
    "DISCARD_LIMIT",
    "LONGEST_ROAD_MIN",
    "LARGEST_ARMY_MIN",
    "BANK_TRADE_RATIO",
    "GENERIC_PORT_RATIO",
    "SPECIAL_PORT_RATIO",
    "MAX_SETTLEMENTS_PER_PLAYER",
    "MAX_CITIES_PER_PLAYER",
    "MAX_ROADS_PER_PLAYER",
    "BUILDING_LIMITS",
    "COSTS",
    "DICE_PROBABILITIES",
    "pip_count",
    "RulesConfig",
]
