"""Moteur de règles: machine à états et gestionnaires de commandes.

Chaque commande est traitée en deux temps:
1. `_check_*` valide l'intégralité de la commande sans rien modifier et lève
   une `RulesError` en cas de refus;
2. `_do_*` applique les effets (aucune erreur possible à ce stade).

Le hasard (dés, vol, pioche) n'est consommé qu'à l'étape 2: une commande
refusée laisse l'état et le générateur intacts. Le moteur est le seul
écrivain du `GameState` qu'il possède.
"""

from __future__ import annotations

import copy
import random
from dataclasses import dataclass
from itertools import combinations_with_replacement
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Sequence, Tuple

from catan.engine.actions import (
    AcceptTrade,
    Action,
    BuildCity,
    BuildRoad,
    BuildSettlement,
    BuyDevelopmentCard,
    CancelTrade,
    DiscardCards,
    EndTurn,
    MoveRobber,
    PlaceInitialRoad,
    PlaceInitialSettlement,
    PlayKnight,
    PlayMonopoly,
    PlayRoadBuilding,
    PlayYearOfPlenty,
    ProposeTrade,
    RejectTrade,
    RollDice,
    TradeWithBank,
    TradeWithPort,
)
from catan.engine.awards import (
    find_winner,
    refresh_victory_points,
    update_largest_army,
    update_longest_road,
)
from catan.engine.board import Building, Edge, Node, Tile
from catan.engine.errors import (
    BuildingLimitReached,
    CardNotHeld,
    DeckEmpty,
    GameOver,
    IllegalPlacement,
    InsufficientResources,
    InvalidPhase,
    InvalidTarget,
    NotCurrentPlayer,
    RulesError,
    UnknownAction,
)
from catan.engine.events import (
    CardsDiscarded,
    CityBuilt,
    DevelopmentCardBought,
    DevelopmentCardPlayed,
    DiceRolled,
    DiscardRequired,
    DomainEvent,
    GameWon,
    LargestArmyChanged,
    LongestRoadChanged,
    MaritimeTrade,
    MonopolyCollected,
    ResourcesGranted,
    ResourceStolen,
    RoadPlaced,
    RobberMoved,
    SettlementPlaced,
    SetupCompleted,
    TradeAccepted,
    TradeCancelled,
    TradeExpired,
    TradeProposed,
    TradeRejected,
    TurnEnded,
)
from catan.engine.rules import (
    BANK_TRADE_RATIO,
    COSTS,
    DESERT,
    DEV_CARD_TYPES,
    KNIGHT,
    MAX_CITIES_PER_PLAYER,
    MAX_ROADS_PER_PLAYER,
    MAX_SETTLEMENTS_PER_PLAYER,
    MONOPOLY,
    RESOURCE_TYPES,
    ROAD_BUILDING,
    YEAR_OF_PLENTY,
    RulesConfig,
)
from catan.engine.state import GamePhase, GameState, Player, TurnPhase
from catan.engine.trading import TradingRules
from catan.log import get_logger

logger = get_logger(__name__)

Checker = Callable[[Any], Any]
Executor = Callable[[Any, Any], None]


@dataclass(frozen=True)
class CommandResult:
    """Résultat d'une commande validée: les évènements décrivent les changements."""

    action: Action
    events: Tuple[DomainEvent, ...]


class RulesEngine:
    """Applique les commandes sur un `GameState` dont il est l'unique écrivain."""

    def __init__(
        self,
        state: GameState,
        *,
        rng: random.Random | None = None,
        seed: int | None = None,
    ) -> None:
        self._state = state
        self._rng = rng or random.Random(seed)
        self._outbox: List[DomainEvent] = []
        self._staged: List[DomainEvent] = []
        self._handlers: Dict[type, Tuple[Checker, Executor]] = {
            PlaceInitialSettlement: (self._check_initial_settlement, self._do_initial_settlement),
            PlaceInitialRoad: (self._check_initial_road, self._do_initial_road),
            RollDice: (self._check_roll, self._do_roll),
            DiscardCards: (self._check_discard, self._do_discard),
            MoveRobber: (self._check_move_robber, self._do_move_robber),
            BuildSettlement: (self._check_build_settlement, self._do_build_settlement),
            BuildCity: (self._check_build_city, self._do_build_city),
            BuildRoad: (self._check_build_road, self._do_build_road),
            BuyDevelopmentCard: (self._check_buy_development, self._do_buy_development),
            PlayKnight: (self._check_knight, self._do_knight),
            PlayRoadBuilding: (self._check_road_building, self._do_road_building),
            PlayMonopoly: (self._check_monopoly, self._do_monopoly),
            PlayYearOfPlenty: (self._check_year_of_plenty, self._do_year_of_plenty),
            TradeWithBank: (self._check_bank_trade, self._do_maritime_trade),
            TradeWithPort: (self._check_port_trade, self._do_maritime_trade),
            ProposeTrade: (self._check_propose_trade, self._do_propose_trade),
            AcceptTrade: (self._check_accept_trade, self._do_accept_trade),
            RejectTrade: (self._check_reject_trade, self._do_reject_trade),
            CancelTrade: (self._check_cancel_trade, self._do_cancel_trade),
            EndTurn: (self._check_end_turn, self._do_end_turn),
        }
        refresh_victory_points(state)

    @classmethod
    def new_game(
        cls,
        player_names: Sequence[str] | None = None,
        *,
        seed: int | None = None,
        board=None,
        dev_deck: Sequence[str] | None = None,
        config: RulesConfig | None = None,
    ) -> "RulesEngine":
        """Crée une partie et un moteur partageant le même générateur."""

        rng = random.Random(seed)
        state = GameState.new_game(
            player_names,
            rng=rng,
            board=board,
            dev_deck=dev_deck,
            config=config,
        )
        return cls(state, rng=rng)

    # -- Requêtes --
    @property
    def state(self) -> GameState:
        """État vivant (lecture seule pour l'appelant)."""

        return self._state

    def get_state(self) -> GameState:
        """Instantané indépendant de l'état courant."""

        return copy.deepcopy(self._state)

    def drain_events(self) -> List[DomainEvent]:
        """Retourne puis vide la boîte d'envoi des évènements."""

        events, self._outbox = self._outbox, []
        return events

    def check(self, action: Action) -> None:
        """Valide une commande sans l'appliquer (lève une `RulesError`)."""

        checker, _ = self._handler(action)
        self._ensure_running()
        checker(action)

    def is_legal(self, action: Action) -> bool:
        try:
            self.check(action)
        except RulesError:
            return False
        return True

    def apply(self, action: Action) -> CommandResult:
        """Valide puis applique une commande."""

        checker, executor = self._handler(action)
        command = type(action).__name__
        try:
            self._ensure_running()
            context = checker(action)
        except RulesError as exc:
            logger.debug("command_rejected", command=command, error=type(exc).__name__, reason=str(exc))
            raise

        self._staged = []
        actor = self._state.current_player_index
        executor(action, context)
        self._after_command(actor)

        events = tuple(self._staged)
        self._staged = []
        self._outbox.extend(events)
        logger.debug(
            "command_applied",
            command=command,
            player_id=actor,
            turn=self._state.turn_number,
            events=len(events),
        )
        return CommandResult(action=action, events=events)

    # -- Commandes (API nommée) --
    def place_initial_settlement(self, node_id: int, *, player_id: int | None = None) -> CommandResult:
        return self.apply(PlaceInitialSettlement(node_id=node_id, player_id=player_id))

    def place_initial_road(self, edge_id: int, *, player_id: int | None = None) -> CommandResult:
        return self.apply(PlaceInitialRoad(edge_id=edge_id, player_id=player_id))

    def roll_dice(
        self, forced: Tuple[int, int] | None = None, *, player_id: int | None = None
    ) -> CommandResult:
        return self.apply(RollDice(forced=forced, player_id=player_id))

    def discard_cards(self, player_id: int, resources: Mapping[str, int]) -> CommandResult:
        return self.apply(DiscardCards(player_id=player_id, resources=dict(resources)))

    def move_robber(
        self, tile_id: int, victim_id: int | None = None, *, player_id: int | None = None
    ) -> CommandResult:
        return self.apply(MoveRobber(tile_id=tile_id, victim_id=victim_id, player_id=player_id))

    def build_settlement(self, node_id: int, *, player_id: int | None = None) -> CommandResult:
        return self.apply(BuildSettlement(node_id=node_id, player_id=player_id))

    def build_city(self, node_id: int, *, player_id: int | None = None) -> CommandResult:
        return self.apply(BuildCity(node_id=node_id, player_id=player_id))

    def build_road(self, edge_id: int, *, player_id: int | None = None) -> CommandResult:
        return self.apply(BuildRoad(edge_id=edge_id, player_id=player_id))

    def buy_development_card(self, *, player_id: int | None = None) -> CommandResult:
        return self.apply(BuyDevelopmentCard(player_id=player_id))

    def play_knight(
        self, tile_id: int, victim_id: int | None = None, *, player_id: int | None = None
    ) -> CommandResult:
        return self.apply(PlayKnight(tile_id=tile_id, victim_id=victim_id, player_id=player_id))

    def play_road_building(self, *edge_ids: int, player_id: int | None = None) -> CommandResult:
        return self.apply(PlayRoadBuilding(edge_ids=tuple(edge_ids), player_id=player_id))

    def play_monopoly(self, resource: str, *, player_id: int | None = None) -> CommandResult:
        return self.apply(PlayMonopoly(resource=resource, player_id=player_id))

    def play_year_of_plenty(
        self, first: str, second: str, *, player_id: int | None = None
    ) -> CommandResult:
        return self.apply(PlayYearOfPlenty(resources=(first, second), player_id=player_id))

    def trade_with_bank(self, give: str, receive: str, *, player_id: int | None = None) -> CommandResult:
        return self.apply(TradeWithBank(give=give, receive=receive, player_id=player_id))

    def trade_with_port(self, give: str, receive: str, *, player_id: int | None = None) -> CommandResult:
        return self.apply(TradeWithPort(give=give, receive=receive, player_id=player_id))

    def propose_trade(
        self,
        target_id: int,
        give: Mapping[str, int],
        receive: Mapping[str, int],
        *,
        player_id: int | None = None,
    ) -> CommandResult:
        return self.apply(
            ProposeTrade(target_id=target_id, give=dict(give), receive=dict(receive), player_id=player_id)
        )

    def accept_trade(self, trade_id: int, player_id: int) -> CommandResult:
        return self.apply(AcceptTrade(trade_id=trade_id, player_id=player_id))

    def reject_trade(self, trade_id: int, player_id: int) -> CommandResult:
        return self.apply(RejectTrade(trade_id=trade_id, player_id=player_id))

    def cancel_trade(self, trade_id: int, player_id: int) -> CommandResult:
        return self.apply(CancelTrade(trade_id=trade_id, player_id=player_id))

    def end_turn(self, *, player_id: int | None = None) -> CommandResult:
        return self.apply(EndTurn(player_id=player_id))

    # -- Actions légales --
    def legal_actions(self) -> List[Action]:
        """Commandes légales pour le ou les joueurs dont une action est attendue.

        Les offres d'échange entre joueurs ne sont pas énumérées.
        """

        if self._state.is_game_over:
            return []
        return [action for action in self._candidate_actions() if self.is_legal(action)]

    def _candidate_actions(self) -> List[Action]:
        s = self._state
        board = s.board

        if s.phase == GamePhase.SETUP:
            if s.setup_pending_node is None:
                return [PlaceInitialSettlement(node_id=node.node_id) for node in board.nodes]
            return [
                PlaceInitialRoad(edge_id=edge_id)
                for edge_id in board.nodes[s.setup_pending_node].edges
            ]

        player = s.current_player
        candidates: List[Action] = []

        if s.turn_phase == TurnPhase.DISCARD_CARDS:
            for player_id, required in sorted(s.pending_discards.items()):
                hand = s.players[player_id].resources
                for split in self._generate_discard_splits(hand, required):
                    candidates.append(DiscardCards(player_id=player_id, resources=split))
            return candidates

        if s.turn_phase == TurnPhase.ROBBER_PLACEMENT:
            return self._robber_candidates(MoveRobber)

        if s.turn_phase == TurnPhase.DICE_ROLL:
            candidates.append(RollDice())
            if player.dev_cards.get(KNIGHT, 0) > 0:
                candidates.extend(self._robber_candidates(PlayKnight))
            return candidates

        # Sous-phase ACTIONS
        for edge in board.edges:
            if edge.owner is None:
                candidates.append(BuildRoad(edge_id=edge.edge_id))
        for node in board.nodes:
            if node.building is None:
                candidates.append(BuildSettlement(node_id=node.node_id))
        for node_id in player.settlements:
            candidates.append(BuildCity(node_id=node_id))
        candidates.append(BuyDevelopmentCard())

        if player.dev_cards.get(KNIGHT, 0) > 0:
            candidates.extend(self._robber_candidates(PlayKnight))
        if player.dev_cards.get(ROAD_BUILDING, 0) > 0:
            candidates.extend(self._road_building_candidates(player))
        if player.dev_cards.get(MONOPOLY, 0) > 0:
            candidates.extend(PlayMonopoly(resource=resource) for resource in RESOURCE_TYPES)
        if player.dev_cards.get(YEAR_OF_PLENTY, 0) > 0:
            candidates.extend(
                PlayYearOfPlenty(resources=pair)
                for pair in combinations_with_replacement(RESOURCE_TYPES, 2)
            )

        for give in RESOURCE_TYPES:
            for receive in RESOURCE_TYPES:
                if give == receive:
                    continue
                candidates.append(TradeWithBank(give=give, receive=receive))
                candidates.append(TradeWithPort(give=give, receive=receive))

        candidates.append(EndTurn())
        return candidates

    def _robber_candidates(self, action_cls) -> List[Action]:
        s = self._state
        mover = s.current_player_index
        candidates: List[Action] = []
        for tile in s.board.tiles:
            if tile.tile_id == s.board.robber_tile_id:
                continue
            candidates.append(action_cls(tile_id=tile.tile_id, victim_id=None))
            for victim in s.players_on_tile(tile.tile_id):
                if victim != mover:
                    candidates.append(action_cls(tile_id=tile.tile_id, victim_id=victim))
        return candidates

    def _road_building_candidates(self, player: Player) -> List[Action]:
        edges = self._state.board.edges
        singles = [
            edge.edge_id
            for edge in edges
            if edge.owner is None and self._road_connects(player.player_id, edge)
        ]
        single_set = set(singles)
        candidates: List[Action] = [PlayRoadBuilding(edge_ids=(edge_id,)) for edge_id in singles]
        for first in singles:
            staged = frozenset((first,))
            for edge in edges:
                second = edge.edge_id
                if second == first or edge.owner is not None:
                    continue
                # Paire indépendante déjà couverte dans l'autre ordre
                if second in single_set and second < first:
                    continue
                if self._road_connects(player.player_id, edge, staged):
                    candidates.append(PlayRoadBuilding(edge_ids=(first, second)))
        return candidates

    @staticmethod
    def _generate_discard_splits(resource_counts: Mapping[str, int], total: int) -> List[Dict[str, int]]:
        """Génère toutes les combinaisons de défausse possibles."""

        results: List[Dict[str, int]] = []

        def backtrack(index: int, remaining: int, current: Dict[str, int]) -> None:
            if remaining == 0:
                results.append(dict(current))
                return
            if index >= len(RESOURCE_TYPES):
                return

            resource = RESOURCE_TYPES[index]
            max_use = min(resource_counts.get(resource, 0), remaining)
            for amount in range(max_use + 1):
                if amount > 0:
                    current[resource] = amount
                else:
                    current.pop(resource, None)
                backtrack(index + 1, remaining - amount, current)
            current.pop(resource, None)

        backtrack(0, total, {})
        return results

    # -- Infrastructure --
    def _handler(self, action: Action) -> Tuple[Checker, Executor]:
        entry = self._handlers.get(type(action))
        if entry is None:
            raise UnknownAction(f"Commande non supportée: {action!r}")
        return entry

    def _emit(self, event: DomainEvent) -> None:
        self._staged.append(event)

    def _ensure_running(self) -> None:
        if self._state.is_game_over:
            raise GameOver("La partie est terminée")

    def _after_command(self, actor: int) -> None:
        s = self._state
        refresh_victory_points(s)
        winner_id = find_winner(s)
        if winner_id is None:
            return

        s.phase = GamePhase.GAME_OVER
        s.winner_id = winner_id
        s.pending_discards = {}
        s.pending_trades = {}
        standings = tuple(player.victory_points for player in s.players)
        self._emit(
            GameWon(
                winner_id=winner_id,
                victory_points=s.players[winner_id].victory_points,
                standings=standings,
            )
        )
        logger.info("game_over", winner_id=winner_id, turn=s.turn_number, standings=standings)

    def _require_main(self, *turn_phases: TurnPhase) -> None:
        s = self._state
        if s.phase != GamePhase.MAIN_GAME:
            raise InvalidPhase(f"Commande réservée à la partie principale (phase: {s.phase.value})")
        if turn_phases and s.turn_phase not in turn_phases:
            expected = ", ".join(phase.value for phase in turn_phases)
            raise InvalidPhase(
                f"Commande attendue en sous-phase {expected} (actuelle: {s.turn_phase.value})"
            )

    def _acting_player(self, player_id: int | None) -> Player:
        s = self._state
        if player_id is not None and player_id != s.current_player_index:
            raise NotCurrentPlayer(
                f"Joueur {player_id} hors tour (joueur courant: {s.current_player_index})"
            )
        return s.current_player

    def _player(self, player_id: int) -> Player:
        players = self._state.players
        if not isinstance(player_id, int) or not 0 <= player_id < len(players):
            raise InvalidTarget(f"Joueur inconnu: {player_id!r}")
        return players[player_id]

    def _node(self, node_id: int) -> Node:
        nodes = self._state.board.nodes
        if not isinstance(node_id, int) or not 0 <= node_id < len(nodes):
            raise InvalidTarget(f"Sommet inconnu: {node_id!r}")
        return nodes[node_id]

    def _edge(self, edge_id: int) -> Edge:
        edges = self._state.board.edges
        if not isinstance(edge_id, int) or not 0 <= edge_id < len(edges):
            raise InvalidTarget(f"Arête inconnue: {edge_id!r}")
        return edges[edge_id]

    def _tile(self, tile_id: int) -> Tile:
        tiles = self._state.board.tiles
        if not isinstance(tile_id, int) or not 0 <= tile_id < len(tiles):
            raise InvalidTarget(f"Tuile inconnue: {tile_id!r}")
        return tiles[tile_id]

    @staticmethod
    def _require_resources(player: Player, cost: Dict[str, int], label: str) -> None:
        if not player.can_afford(cost):
            raise InsufficientResources(f"Ressources insuffisantes pour: {label}")

    @staticmethod
    def _pay(player: Player, cost: Dict[str, int]) -> None:
        for resource, amount in cost.items():
            player.resources[resource] -= amount

    def _respects_distance_rule(self, node: Node) -> bool:
        """Règle de distance: sommet libre et aucun voisin construit."""

        nodes = self._state.board.nodes
        if node.building is not None:
            return False
        return all(nodes[neighbor].building is None for neighbor in node.neighbors)

    def _road_connects(
        self,
        player_id: int,
        edge: Edge,
        staged: FrozenSet[int] = frozenset(),
    ) -> bool:
        """Vérifie qu'une arête prolonge le réseau du joueur.

        Une construction adverse sur l'extrémité coupe la continuité.
        """

        board = self._state.board
        for node_id in edge.nodes:
            node = board.nodes[node_id]
            if node.owner == player_id:
                return True
            if node.owner is not None:
                continue
            for other_id in node.edges:
                if other_id == edge.edge_id:
                    continue
                if board.edges[other_id].owner == player_id or other_id in staged:
                    return True
        return False

    def _place_settlement(self, player: Player, node: Node) -> None:
        node.building = Building.SETTLEMENT
        node.owner = player.player_id
        player.settlements.append(node.node_id)

    def _place_road(self, player: Player, edge: Edge) -> None:
        edge.owner = player.player_id
        player.roads.append(edge.edge_id)

    def _update_longest_road(self, actor: int) -> None:
        s = self._state
        previous = s.longest_road_owner
        if update_longest_road(s, actor):
            self._emit(
                LongestRoadChanged(
                    previous_owner=previous,
                    new_owner=s.longest_road_owner,
                    length=s.longest_road_length,
                )
            )
            logger.info(
                "longest_road_changed",
                previous_owner=previous,
                new_owner=s.longest_road_owner,
                length=s.longest_road_length,
            )

    def _update_largest_army(self, actor: int) -> None:
        s = self._state
        previous = s.largest_army_owner
        if update_largest_army(s, actor):
            self._emit(
                LargestArmyChanged(
                    previous_owner=previous,
                    new_owner=s.largest_army_owner,
                    size=s.largest_army_size,
                )
            )
            logger.info(
                "largest_army_changed",
                previous_owner=previous,
                new_owner=s.largest_army_owner,
                size=s.largest_army_size,
            )

    # -- Setup --
    def _check_initial_settlement(self, action: PlaceInitialSettlement) -> Player:
        s = self._state
        if s.phase != GamePhase.SETUP:
            raise InvalidPhase("Les colonies gratuites sont réservées au setup")
        player = self._acting_player(action.player_id)
        if s.setup_pending_node is not None:
            raise InvalidPhase("Route de setup attendue avant une nouvelle colonie")
        if len(player.settlements) + len(player.cities) >= s.setup_round:
            raise InvalidPhase(f"Colonie déjà placée pour le tour de setup {s.setup_round}")
        node = self._node(action.node_id)
        if node.building is not None:
            raise IllegalPlacement(f"Sommet {node.node_id} déjà occupé")
        if not self._respects_distance_rule(node):
            raise IllegalPlacement(f"Sommet {node.node_id} trop proche d'une construction")
        return player

    def _do_initial_settlement(self, action: PlaceInitialSettlement, player: Player) -> None:
        s = self._state
        node = s.board.nodes[action.node_id]
        self._place_settlement(player, node)
        s.setup_pending_node = node.node_id
        self._emit(SettlementPlaced(player_id=player.player_id, node_id=node.node_id, initial=True))

        # Seule la seconde colonie rapporte des ressources de départ
        if s.setup_round == 2:
            grant: Dict[str, int] = {}
            for tile_id in node.adjacent_tiles:
                tile = s.board.tiles[tile_id]
                if tile.resource == DESERT:
                    continue
                player.resources[tile.resource] += 1
                grant[tile.resource] = grant.get(tile.resource, 0) + 1
            if grant:
                self._emit(ResourcesGranted(grants={player.player_id: grant}, reason="setup"))

        self._update_longest_road(player.player_id)

    def _check_initial_road(self, action: PlaceInitialRoad) -> Player:
        s = self._state
        if s.phase != GamePhase.SETUP:
            raise InvalidPhase("Les routes gratuites sont réservées au setup")
        player = self._acting_player(action.player_id)
        if s.setup_pending_node is None:
            raise InvalidPhase("Colonie de setup attendue avant la route")
        edge = self._edge(action.edge_id)
        if edge.owner is not None:
            raise IllegalPlacement(f"Arête {edge.edge_id} déjà occupée")
        if s.setup_pending_node not in edge.nodes:
            raise IllegalPlacement("La route doit toucher la colonie qui vient d'être posée")
        return player

    def _do_initial_road(self, action: PlaceInitialRoad, player: Player) -> None:
        s = self._state
        edge = s.board.edges[action.edge_id]
        self._place_road(player, edge)
        s.setup_pending_node = None
        self._emit(RoadPlaced(player_id=player.player_id, edge_id=edge.edge_id, initial=True))
        self._update_longest_road(player.player_id)
        self._advance_setup()

    def _advance_setup(self) -> None:
        """Ordre serpent: 0..n-1 puis n-1..0, le dernier joueur joue deux fois de suite."""

        s = self._state
        last_index = len(s.players) - 1
        index = s.current_player_index

        if s.setup_round == 1:
            if index < last_index:
                s.current_player_index = index + 1
            else:
                s.setup_round = 2
                s.setup_direction = -1
            return

        if index > 0:
            s.current_player_index = index - 1
            return

        s.phase = GamePhase.MAIN_GAME
        s.turn_phase = TurnPhase.DICE_ROLL
        s.current_player_index = 0
        s.turn_number = 1
        self._emit(SetupCompleted(first_player_id=0))
        logger.info("setup_complete", players=len(s.players))

    # -- Dés, défausse, voleur --
    def _check_roll(self, action: RollDice) -> Player:
        self._require_main(TurnPhase.DICE_ROLL)
        player = self._acting_player(action.player_id)
        if action.forced is not None:
            if len(action.forced) != 2 or any(
                not isinstance(die, int) or not 1 <= die <= 6 for die in action.forced
            ):
                raise InvalidTarget(f"Valeurs de dés invalides: {action.forced!r}")
        return player

    def _do_roll(self, action: RollDice, player: Player) -> None:
        s = self._state
        if action.forced is not None:
            die1, die2 = action.forced
        else:
            die1 = self._rng.randint(1, 6)
            die2 = self._rng.randint(1, 6)
        total = die1 + die2
        s.last_roll = (die1, die2)
        self._emit(DiceRolled(player_id=player.player_id, die1=die1, die2=die2, total=total))

        if total == 7:
            limit = s.config.discard_limit
            requirements = {
                p.player_id: p.total_resources // 2
                for p in s.players
                if p.total_resources > limit
            }
            s.pending_discards = requirements
            if requirements:
                s.turn_phase = TurnPhase.DISCARD_CARDS
                self._emit(DiscardRequired(requirements=dict(requirements)))
            else:
                s.turn_phase = TurnPhase.ROBBER_PLACEMENT
            return

        grants = self._produce(total)
        if grants:
            self._emit(ResourcesGranted(grants=grants, reason="production"))
        s.turn_phase = TurnPhase.ACTIONS

    def _produce(self, total: int) -> Dict[int, Dict[str, int]]:
        """Distribue les ressources des tuiles portant `total` (hors voleur)."""

        s = self._state
        grants: Dict[int, Dict[str, int]] = {}
        for tile in s.board.tiles:
            if tile.token != total or tile.has_robber:
                continue
            for node_id in tile.node_ids:
                node = s.board.nodes[node_id]
                if node.building is None or node.owner is None:
                    continue
                amount = 2 if node.building == Building.CITY else 1
                s.players[node.owner].resources[tile.resource] += amount
                player_grant = grants.setdefault(node.owner, {})
                player_grant[tile.resource] = player_grant.get(tile.resource, 0) + amount
        return grants

    def _check_discard(self, action: DiscardCards) -> Player:
        s = self._state
        self._require_main(TurnPhase.DISCARD_CARDS)
        player = self._player(action.player_id)
        required = s.pending_discards.get(player.player_id, 0)
        if required <= 0:
            raise InvalidPhase(f"Le joueur {player.player_id} n'a rien à défausser")
        for resource, amount in action.resources.items():
            if resource not in RESOURCE_TYPES:
                raise InvalidTarget(f"Ressource inconnue: {resource!r}")
            if amount < 0:
                raise InvalidTarget(f"Quantité négative: {resource}={amount}")
        discarded = sum(action.resources.values())
        if discarded != required:
            raise InvalidTarget(f"{required} cartes à défausser, {discarded} proposées")
        for resource, amount in action.resources.items():
            if player.resources.get(resource, 0) < amount:
                raise CardNotHeld(f"Le joueur {player.player_id} n'a pas {amount} {resource}")
        return player

    def _do_discard(self, action: DiscardCards, player: Player) -> None:
        s = self._state
        discarded = {resource: amount for resource, amount in action.resources.items() if amount}
        self._pay(player, discarded)
        del s.pending_discards[player.player_id]
        self._emit(CardsDiscarded(player_id=player.player_id, resources=discarded))
        if not s.pending_discards:
            s.turn_phase = TurnPhase.ROBBER_PLACEMENT

    def _check_robber_target(self, tile_id: int, victim_id: int | None, mover_id: int) -> None:
        s = self._state
        self._tile(tile_id)
        if tile_id == s.board.robber_tile_id:
            raise InvalidTarget("Le voleur doit quitter sa tuile actuelle")
        if victim_id is None:
            return
        self._player(victim_id)
        if victim_id == mover_id:
            raise InvalidTarget("Impossible de se voler soi-même")
        if victim_id not in s.players_on_tile(tile_id):
            raise InvalidTarget(f"Le joueur {victim_id} n'a aucune construction sur la tuile {tile_id}")

    def _check_move_robber(self, action: MoveRobber) -> Player:
        self._require_main(TurnPhase.ROBBER_PLACEMENT)
        player = self._acting_player(action.player_id)
        self._check_robber_target(action.tile_id, action.victim_id, player.player_id)
        return player

    def _do_move_robber(self, action: MoveRobber, player: Player) -> None:
        self._relocate_robber(player, action.tile_id, action.victim_id)
        self._state.turn_phase = TurnPhase.ACTIONS

    def _relocate_robber(self, player: Player, tile_id: int, victim_id: int | None) -> None:
        s = self._state
        board = s.board
        board.tiles[board.robber_tile_id].has_robber = False
        board.tiles[tile_id].has_robber = True
        board.robber_tile_id = tile_id
        self._emit(RobberMoved(player_id=player.player_id, tile_id=tile_id, victim_id=victim_id))

        if victim_id is None:
            return
        victim = s.players[victim_id]
        hand = [
            resource
            for resource in RESOURCE_TYPES
            for _ in range(victim.resources.get(resource, 0))
        ]
        stolen = self._rng.choice(hand) if hand else None
        if stolen is not None:
            victim.resources[stolen] -= 1
            player.resources[stolen] += 1
        self._emit(ResourceStolen(thief_id=player.player_id, victim_id=victim_id, resource=stolen))

    # -- Constructions --
    def _check_build_settlement(self, action: BuildSettlement) -> Player:
        s = self._state
        self._require_main(TurnPhase.ACTIONS)
        player = self._acting_player(action.player_id)
        node = self._node(action.node_id)
        if node.building is not None:
            raise IllegalPlacement(f"Sommet {node.node_id} déjà occupé")
        if not self._respects_distance_rule(node):
            raise IllegalPlacement(f"Sommet {node.node_id} trop proche d'une construction")
        if not any(s.board.edges[edge_id].owner == player.player_id for edge_id in node.edges):
            raise IllegalPlacement(f"Sommet {node.node_id} non relié au réseau du joueur")
        if len(player.settlements) >= MAX_SETTLEMENTS_PER_PLAYER:
            raise BuildingLimitReached("Plus aucune colonie disponible")
        self._require_resources(player, COSTS["settlement"], "colonie")
        return player

    def _do_build_settlement(self, action: BuildSettlement, player: Player) -> None:
        node = self._state.board.nodes[action.node_id]
        self._pay(player, COSTS["settlement"])
        self._place_settlement(player, node)
        self._emit(SettlementPlaced(player_id=player.player_id, node_id=node.node_id))
        # Une colonie peut couper la route d'un adversaire
        self._update_longest_road(player.player_id)

    def _check_build_city(self, action: BuildCity) -> Player:
        self._require_main(TurnPhase.ACTIONS)
        player = self._acting_player(action.player_id)
        node = self._node(action.node_id)
        if node.owner != player.player_id or node.building != Building.SETTLEMENT:
            raise IllegalPlacement(f"Aucune colonie du joueur sur le sommet {node.node_id}")
        if len(player.cities) >= MAX_CITIES_PER_PLAYER:
            raise BuildingLimitReached("Plus aucune ville disponible")
        self._require_resources(player, COSTS["city"], "ville")
        return player

    def _do_build_city(self, action: BuildCity, player: Player) -> None:
        node = self._state.board.nodes[action.node_id]
        self._pay(player, COSTS["city"])
        player.settlements.remove(node.node_id)
        player.cities.append(node.node_id)
        node.building = Building.CITY
        self._emit(CityBuilt(player_id=player.player_id, node_id=node.node_id))

    def _check_build_road(self, action: BuildRoad) -> Player:
        self._require_main(TurnPhase.ACTIONS)
        player = self._acting_player(action.player_id)
        edge = self._edge(action.edge_id)
        if edge.owner is not None:
            raise IllegalPlacement(f"Arête {edge.edge_id} déjà occupée")
        if not self._road_connects(player.player_id, edge):
            raise IllegalPlacement(f"Arête {edge.edge_id} non reliée au réseau du joueur")
        if len(player.roads) >= MAX_ROADS_PER_PLAYER:
            raise BuildingLimitReached("Plus aucune route disponible")
        self._require_resources(player, COSTS["road"], "route")
        return player

    def _do_build_road(self, action: BuildRoad, player: Player) -> None:
        edge = self._state.board.edges[action.edge_id]
        self._pay(player, COSTS["road"])
        self._place_road(player, edge)
        self._emit(RoadPlaced(player_id=player.player_id, edge_id=edge.edge_id))
        self._update_longest_road(player.player_id)

    # -- Cartes de développement --
    def _check_buy_development(self, action: BuyDevelopmentCard) -> Player:
        self._require_main(TurnPhase.ACTIONS)
        player = self._acting_player(action.player_id)
        if self._state.development_deck.remaining <= 0:
            raise DeckEmpty("La pioche de développement est vide")
        self._require_resources(player, COSTS["development"], "carte de développement")
        return player

    def _do_buy_development(self, action: BuyDevelopmentCard, player: Player) -> None:
        self._pay(player, COSTS["development"])
        card = self._state.development_deck.draw()
        player.new_dev_cards[card] = player.new_dev_cards.get(card, 0) + 1
        self._emit(DevelopmentCardBought(player_id=player.player_id, card=card))

    def _check_playable(self, player: Player, card: str) -> None:
        if player.dev_cards.get(card, 0) <= 0:
            if player.new_dev_cards.get(card, 0) > 0:
                raise CardNotHeld(f"Carte {card} achetée ce tour-ci: jouable au prochain tour")
            raise CardNotHeld(f"Le joueur {player.player_id} ne possède pas de carte {card}")
        if self._state.dev_card_played_this_turn:
            raise InvalidPhase("Une seule carte de développement par tour")

    def _consume_card(self, player: Player, card: str) -> None:
        player.dev_cards[card] -= 1
        self._state.dev_card_played_this_turn = True
        self._emit(DevelopmentCardPlayed(player_id=player.player_id, card=card))

    def _check_knight(self, action: PlayKnight) -> Player:
        self._require_main(TurnPhase.DICE_ROLL, TurnPhase.ACTIONS)
        player = self._acting_player(action.player_id)
        self._check_playable(player, KNIGHT)
        self._check_robber_target(action.tile_id, action.victim_id, player.player_id)
        return player

    def _do_knight(self, action: PlayKnight, player: Player) -> None:
        self._consume_card(player, KNIGHT)
        player.knights_played += 1
        self._relocate_robber(player, action.tile_id, action.victim_id)
        self._update_largest_army(player.player_id)

    def _check_road_building(self, action: PlayRoadBuilding) -> Player:
        self._require_main(TurnPhase.ACTIONS)
        player = self._acting_player(action.player_id)
        self._check_playable(player, ROAD_BUILDING)
        edge_ids = tuple(action.edge_ids)
        if not 1 <= len(edge_ids) <= 2:
            raise InvalidTarget("Construction de routes: 1 ou 2 routes")
        if len(set(edge_ids)) != len(edge_ids):
            raise InvalidTarget("Construction de routes: arêtes dupliquées")
        if len(player.roads) + len(edge_ids) > MAX_ROADS_PER_PLAYER:
            raise BuildingLimitReached("Pas assez de routes disponibles")
        # La seconde route peut s'appuyer sur la première
        staged: FrozenSet[int] = frozenset()
        for edge_id in edge_ids:
            edge = self._edge(edge_id)
            if edge.owner is not None:
                raise IllegalPlacement(f"Arête {edge_id} déjà occupée")
            if not self._road_connects(player.player_id, edge, staged):
                raise IllegalPlacement(f"Arête {edge_id} non reliée au réseau du joueur")
            staged = staged | {edge_id}
        return player

    def _do_road_building(self, action: PlayRoadBuilding, player: Player) -> None:
        self._consume_card(player, ROAD_BUILDING)
        for edge_id in action.edge_ids:
            edge = self._state.board.edges[edge_id]
            self._place_road(player, edge)
            self._emit(RoadPlaced(player_id=player.player_id, edge_id=edge_id, free=True))
        self._update_longest_road(player.player_id)

    def _check_monopoly(self, action: PlayMonopoly) -> Player:
        self._require_main(TurnPhase.ACTIONS)
        player = self._acting_player(action.player_id)
        self._check_playable(player, MONOPOLY)
        if action.resource not in RESOURCE_TYPES:
            raise InvalidTarget(f"Ressource inconnue: {action.resource!r}")
        return player

    def _do_monopoly(self, action: PlayMonopoly, player: Player) -> None:
        self._consume_card(player, MONOPOLY)
        taken: Dict[int, int] = {}
        for other in self._state.players:
            if other.player_id == player.player_id:
                continue
            amount = other.resources.get(action.resource, 0)
            if amount > 0:
                taken[other.player_id] = amount
                other.resources[action.resource] = 0
        player.resources[action.resource] += sum(taken.values())
        self._emit(MonopolyCollected(player_id=player.player_id, resource=action.resource, taken=taken))

    def _check_year_of_plenty(self, action: PlayYearOfPlenty) -> Player:
        self._require_main(TurnPhase.ACTIONS)
        player = self._acting_player(action.player_id)
        self._check_playable(player, YEAR_OF_PLENTY)
        if len(action.resources) != 2:
            raise InvalidTarget("Year of Plenty: exactement 2 ressources")
        for resource in action.resources:
            if resource not in RESOURCE_TYPES:
                raise InvalidTarget(f"Ressource inconnue: {resource!r}")
        return player

    def _do_year_of_plenty(self, action: PlayYearOfPlenty, player: Player) -> None:
        self._consume_card(player, YEAR_OF_PLENTY)
        grant: Dict[str, int] = {}
        for resource in action.resources:
            player.resources[resource] += 1
            grant[resource] = grant.get(resource, 0) + 1
        self._emit(ResourcesGranted(grants={player.player_id: grant}, reason="year_of_plenty"))

    # -- Commerce --
    def _check_bank_trade(self, action: TradeWithBank) -> Tuple[Player, int]:
        self._require_main(TurnPhase.ACTIONS)
        player = self._acting_player(action.player_id)
        TradingRules.check_maritime(player, action.give, action.receive, BANK_TRADE_RATIO)
        return player, BANK_TRADE_RATIO

    def _check_port_trade(self, action: TradeWithPort) -> Tuple[Player, int]:
        self._require_main(TurnPhase.ACTIONS)
        player = self._acting_player(action.player_id)
        ratio = TradingRules.best_ratio(self._state, player.player_id, action.give)
        TradingRules.check_maritime(player, action.give, action.receive, ratio)
        return player, ratio

    def _do_maritime_trade(self, action, context: Tuple[Player, int]) -> None:
        player, ratio = context
        TradingRules.execute_maritime(player, action.give, action.receive, ratio)
        self._emit(
            MaritimeTrade(
                player_id=player.player_id,
                give=action.give,
                give_amount=ratio,
                receive=action.receive,
                ratio=ratio,
            )
        )

    def _check_propose_trade(self, action: ProposeTrade) -> Player:
        self._require_main(TurnPhase.ACTIONS)
        player = self._acting_player(action.player_id)
        TradingRules.check_proposal(self._state, player, action.target_id, action.give, action.receive)
        return player

    def _do_propose_trade(self, action: ProposeTrade, player: Player) -> None:
        trade = TradingRules.create_offer(
            self._state, player.player_id, action.target_id, action.give, action.receive
        )
        self._emit(
            TradeProposed(
                trade_id=trade.trade_id,
                proposer_id=trade.proposer_id,
                target_id=trade.target_id,
                give=dict(trade.give),
                receive=dict(trade.receive),
            )
        )

    def _check_accept_trade(self, action: AcceptTrade):
        self._require_main(TurnPhase.ACTIONS)
        return TradingRules.check_acceptance(self._state, action.trade_id, action.player_id)

    def _do_accept_trade(self, action: AcceptTrade, trade) -> None:
        TradingRules.execute_transfer(self._state, trade)
        self._emit(
            TradeAccepted(trade_id=trade.trade_id, proposer_id=trade.proposer_id, target_id=trade.target_id)
        )

    def _check_reject_trade(self, action: RejectTrade):
        self._require_main()
        return TradingRules.check_response(self._state, action.trade_id, action.player_id)

    def _do_reject_trade(self, action: RejectTrade, trade) -> None:
        del self._state.pending_trades[trade.trade_id]
        self._emit(TradeRejected(trade_id=trade.trade_id, target_id=trade.target_id))

    def _check_cancel_trade(self, action: CancelTrade):
        self._require_main()
        trade = TradingRules.find_offer(self._state, action.trade_id)
        if action.player_id != trade.proposer_id:
            raise NotCurrentPlayer(f"Seul le joueur {trade.proposer_id} peut annuler l'offre")
        return trade

    def _do_cancel_trade(self, action: CancelTrade, trade) -> None:
        del self._state.pending_trades[trade.trade_id]
        self._emit(TradeCancelled(trade_id=trade.trade_id, proposer_id=trade.proposer_id))

    # -- Fin de tour --
    def _check_end_turn(self, action: EndTurn) -> Player:
        self._require_main(TurnPhase.ACTIONS)
        return self._acting_player(action.player_id)

    def _do_end_turn(self, action: EndTurn, player: Player) -> None:
        s = self._state
        # Les cartes achetées ce tour deviennent jouables
        for card in DEV_CARD_TYPES:
            bought = player.new_dev_cards.get(card, 0)
            if bought:
                player.dev_cards[card] = player.dev_cards.get(card, 0) + bought
                player.new_dev_cards[card] = 0

        s.dev_card_played_this_turn = False
        s.current_player_index = (s.current_player_index + 1) % len(s.players)
        s.turn_number += 1
        s.turn_phase = TurnPhase.DICE_ROLL
        s.last_roll = None
        s.pending_discards = {}

        for trade_id in TradingRules.expire_offers(s):
            self._emit(TradeExpired(trade_id=trade_id))

        self._emit(
            TurnEnded(
                player_id=player.player_id,
                next_player_id=s.current_player_index,
                turn_number=s.turn_number,
            )
        )


__all__ = ["RulesEngine", "CommandResult"]
