"""Titres spéciaux et points de victoire.

- Plus longue route: plus long chemin simple (sans réutiliser une route) dans
  le réseau d'un joueur, interrompu par les constructions adverses.
- Plus grande armée: nombre de chevaliers joués.
- Points de victoire: colonies (1), villes (2), cartes VP (1, cachées),
  titres (2 chacun).
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from catan.engine.board import Board
from catan.engine.state import GameState

AWARD_POINTS = 2


def longest_road_length(board: Board, player_id: int) -> int:
    """Longueur du plus long chemin de routes du joueur.

    Parcours en profondeur depuis chaque sommet du sous-graphe du joueur, en
    mémorisant les arêtes utilisées (un sommet peut être revisité, une route
    non). Un sommet occupé par un adversaire termine le chemin. Pile explicite:
    la profondeur est bornée par le nombre de routes (15).
    """

    adjacency: Dict[int, List[Tuple[int, int]]] = defaultdict(list)
    for edge in board.edges:
        if edge.owner != player_id:
            continue
        a, b = edge.nodes
        adjacency[a].append((edge.edge_id, b))
        adjacency[b].append((edge.edge_id, a))

    if not adjacency:
        return 0

    def blocked(node_id: int) -> bool:
        owner = board.nodes[node_id].owner
        return owner is not None and owner != player_id

    best = 0
    for start in adjacency:
        stack: List[Tuple[int, FrozenSet[int]]] = [(start, frozenset())]
        while stack:
            node_id, used = stack.pop()
            length = len(used)
            if length > best:
                best = length
            if length and blocked(node_id):
                continue
            for edge_id, neighbor in adjacency[node_id]:
                if edge_id in used:
                    continue
                stack.append((neighbor, used | {edge_id}))
    return best


def resolve_award(
    scores: Mapping[int, int],
    holder: Optional[int],
    minimum: int,
    *,
    acting_player: Optional[int] = None,
    transfer_on_tie: bool = False,
) -> Optional[int]:
    """Détermine le détenteur d'un titre à partir des scores courants.

    Le détenteur conserve le titre tant qu'il reste à égalité avec le meilleur
    score qualifiant. Un challenger doit le dépasser strictement, sauf si
    `transfer_on_tie` est actif: le joueur qui agit prend alors le titre dès
    qu'il égale le meilleur score. Sans détenteur, une égalité en tête ne
    désigne personne (sauf même exception).
    """

    best = max(scores.values(), default=0)
    if best < minimum:
        return None

    leaders = [player_id for player_id, score in scores.items() if score == best]

    if transfer_on_tie and acting_player in leaders and acting_player != holder:
        return acting_player

    if holder is not None and holder in leaders:
        return holder

    if len(leaders) == 1:
        return leaders[0]
    return None


def refresh_victory_points(state: GameState) -> None:
    """Recalcule les totaux de points (publics et avec cartes cachées)."""

    for player in state.players:
        public = len(player.settlements) + 2 * len(player.cities)
        if state.longest_road_owner == player.player_id:
            public += AWARD_POINTS
        if state.largest_army_owner == player.player_id:
            public += AWARD_POINTS
        player.public_victory_points = public
        player.victory_points = public + player.victory_point_cards


def update_longest_road(state: GameState, acting_player: Optional[int] = None) -> bool:
    """Met à jour le titre de plus longue route; True si le détenteur change."""

    lengths = {
        player.player_id: longest_road_length(state.board, player.player_id)
        for player in state.players
    }
    previous = state.longest_road_owner
    owner = resolve_award(
        lengths,
        previous,
        state.config.longest_road_min,
        acting_player=acting_player,
        transfer_on_tie=state.config.transfer_award_on_tie,
    )
    state.longest_road_owner = owner
    state.longest_road_length = lengths[owner] if owner is not None else 0
    if owner != previous:
        refresh_victory_points(state)
        return True
    return False


def update_largest_army(state: GameState, acting_player: Optional[int] = None) -> bool:
    """Met à jour le titre de plus grande armée; True si le détenteur change."""

    sizes = {player.player_id: player.knights_played for player in state.players}
    previous = state.largest_army_owner
    owner = resolve_award(
        sizes,
        previous,
        state.config.largest_army_min,
        acting_player=acting_player,
        transfer_on_tie=state.config.transfer_award_on_tie,
    )
    state.largest_army_owner = owner
    state.largest_army_size = sizes[owner] if owner is not None else 0
    if owner != previous:
        refresh_victory_points(state)
        return True
    return False


def find_winner(state: GameState) -> Optional[int]:
    """Premier joueur ayant atteint le seuil.

    Le joueur courant est prioritaire; sinon le meilleur total, puis le plus
    petit identifiant.
    """

    threshold = state.config.victory_points_to_win
    eligible = [player for player in state.players if player.victory_points >= threshold]
    if not eligible:
        return None
    current = state.current_player_index
    if any(player.player_id == current for player in eligible):
        return current
    best = max(eligible, key=lambda player: (player.victory_points, -player.player_id))
    return best.player_id


__all__ = [
    "AWARD_POINTS",
    "longest_road_length",
    "resolve_award",
    "refresh_victory_points",
    "update_longest_road",
    "update_largest_army",
    "find_winner",
]
