"""Commerce: banque (4:1), ports (3:1 / 2:1) et échanges entre joueurs.

Les fonctions `check_*` valident sans modifier l'état et lèvent une
`RulesError`; les fonctions `execute_*` supposent la validation faite.
"""

from __future__ import annotations

from typing import Dict, Mapping

from catan.engine.board import GENERIC
from catan.engine.errors import (
    InsufficientResources,
    InvalidTarget,
    NotCurrentPlayer,
)
from catan.engine.rules import (
    BANK_TRADE_RATIO,
    GENERIC_PORT_RATIO,
    RESOURCE_TYPES,
    SPECIAL_PORT_RATIO,
)
from catan.engine.state import GameState, PendingTrade, Player


class TradingRules:
    """Résolution des taux et exécution des échanges."""

    @staticmethod
    def best_ratio(state: GameState, player_id: int, resource: str) -> int:
        """Meilleur taux disponible pour céder `resource`."""

        kinds = state.player_ports(player_id)
        if resource in kinds:
            return SPECIAL_PORT_RATIO
        if GENERIC in kinds:
            return GENERIC_PORT_RATIO
        return BANK_TRADE_RATIO

    # -- Banque / ports --
    @staticmethod
    def check_maritime(player: Player, give: str, receive: str, ratio: int) -> None:
        if give not in RESOURCE_TYPES or receive not in RESOURCE_TYPES:
            raise InvalidTarget(f"Ressource inconnue: {give!r} / {receive!r}")
        if give == receive:
            raise InvalidTarget("Impossible d'échanger une ressource contre elle-même")
        if player.resources.get(give, 0) < ratio:
            raise InsufficientResources(
                f"{ratio} {give} requis, {player.resources.get(give, 0)} disponibles"
            )

    @staticmethod
    def execute_maritime(player: Player, give: str, receive: str, ratio: int) -> None:
        player.resources[give] -= ratio
        player.resources[receive] += 1

    # -- Joueur ↔ joueur --
    @staticmethod
    def check_bundle(bundle: Mapping[str, int], label: str) -> None:
        if not bundle or all(amount == 0 for amount in bundle.values()):
            raise InvalidTarget(f"Lot '{label}' vide")
        for resource, amount in bundle.items():
            if resource not in RESOURCE_TYPES:
                raise InvalidTarget(f"Ressource inconnue dans '{label}': {resource!r}")
            if amount < 0:
                raise InvalidTarget(f"Quantité négative dans '{label}': {resource}={amount}")

    @classmethod
    def check_proposal(
        cls,
        state: GameState,
        proposer: Player,
        target_id: int,
        give: Mapping[str, int],
        receive: Mapping[str, int],
    ) -> None:
        if not 0 <= target_id < len(state.players):
            raise InvalidTarget(f"Joueur inconnu: {target_id}")
        if target_id == proposer.player_id:
            raise InvalidTarget("Impossible d'échanger avec soi-même")
        cls.check_bundle(give, "give")
        cls.check_bundle(receive, "receive")
        if not proposer.can_afford(dict(give)):
            raise InsufficientResources("Le proposant ne possède pas les ressources offertes")

    @staticmethod
    def create_offer(
        state: GameState,
        proposer_id: int,
        target_id: int,
        give: Mapping[str, int],
        receive: Mapping[str, int],
    ) -> PendingTrade:
        trade = PendingTrade(
            trade_id=state.next_trade_id,
            proposer_id=proposer_id,
            target_id=target_id,
            give={resource: amount for resource, amount in give.items() if amount},
            receive={resource: amount for resource, amount in receive.items() if amount},
            created_turn=state.turn_number,
            expires_at_turn=state.turn_number + state.config.trade_offer_ttl_turns,
        )
        state.pending_trades[trade.trade_id] = trade
        state.next_trade_id += 1
        return trade

    @staticmethod
    def find_offer(state: GameState, trade_id: int) -> PendingTrade:
        trade = state.pending_trades.get(trade_id)
        if trade is None:
            raise InvalidTarget(f"Offre d'échange inconnue ou expirée: {trade_id}")
        return trade

    @classmethod
    def check_response(cls, state: GameState, trade_id: int, player_id: int) -> PendingTrade:
        trade = cls.find_offer(state, trade_id)
        if player_id != trade.target_id:
            raise NotCurrentPlayer(
                f"Seul le joueur {trade.target_id} peut répondre à l'offre {trade_id}"
            )
        return trade

    @classmethod
    def check_acceptance(cls, state: GameState, trade_id: int, player_id: int) -> PendingTrade:
        # L'état a pu changer depuis l'offre: revalider les deux mains
        trade = cls.check_response(state, trade_id, player_id)
        if not state.players[trade.proposer_id].can_afford(trade.give):
            raise InsufficientResources("Le proposant ne possède plus les ressources offertes")
        if not state.players[trade.target_id].can_afford(trade.receive):
            raise InsufficientResources("Ressources insuffisantes pour accepter l'offre")
        return trade

    @staticmethod
    def execute_transfer(state: GameState, trade: PendingTrade) -> None:
        proposer = state.players[trade.proposer_id]
        target = state.players[trade.target_id]
        _move(proposer.resources, target.resources, trade.give)
        _move(target.resources, proposer.resources, trade.receive)
        del state.pending_trades[trade.trade_id]

    @staticmethod
    def expire_offers(state: GameState) -> list[int]:
        expired = [
            trade_id
            for trade_id, trade in state.pending_trades.items()
            if state.turn_number >= trade.expires_at_turn
        ]
        for trade_id in expired:
            del state.pending_trades[trade_id]
        return expired


def _move(source: Dict[str, int], destination: Dict[str, int], bundle: Mapping[str, int]) -> None:
    for resource, amount in bundle.items():
        if amount == 0:
            continue
        source[resource] -= amount
        destination[resource] += amount


__all__ = ["TradingRules"]
