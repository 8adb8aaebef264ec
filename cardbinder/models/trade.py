"""
Trade proposal models.

Negotiation transport is owned by the storage layer: a trade is a record
with a status field visible to both parties. This module only defines its
shape and the allowed status transitions.

    pending --accept--> accepted --complete--> completed
    pending --decline--> declined
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from cardbinder.models.card import Card
from cardbinder.models.failure import TradeError


class TradeStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class TradeItem:
    """A snapshot of a card offered or requested, with quantity."""

    card: Card
    quantity: int = 1
    notes: str = ""


@dataclass
class Trade:
    """
    A trade proposal between two users.

    Attributes:
        id: Trade identifier
        initiator_id: User who proposed the trade
        recipient_id: User who must accept or decline
        status: Current status
        wants: Cards the initiator requests from the recipient
        offers: Cards the initiator gives in return
    """

    id: str
    initiator_id: str
    recipient_id: str
    status: TradeStatus = TradeStatus.PENDING
    wants: list[TradeItem] = field(default_factory=list)
    offers: list[TradeItem] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


def create_trade(
    trade_id: str,
    initiator_id: str,
    recipient_id: str,
    wants: list[TradeItem],
    offers: list[TradeItem] | None = None,
) -> Trade:
    """
    Create a pending trade.

    Raises:
        TradeError: If no cards are requested or a user trades with themself
    """
    if not wants:
        raise TradeError("You must select at least one card to request")
    if initiator_id == recipient_id:
        raise TradeError("You cannot propose a trade to yourself")

    return Trade(
        id=trade_id,
        initiator_id=initiator_id,
        recipient_id=recipient_id,
        wants=list(wants),
        offers=list(offers or []),
    )


def _transition(trade: Trade, expected: TradeStatus, new_status: TradeStatus) -> None:
    if trade.status != expected:
        raise TradeError(
            f"Trade is {trade.status.value}; expected {expected.value}",
            status_code=409,
        )
    trade.status = new_status
    trade.updated_at = datetime.now(UTC)


def accept_trade(
    trade: Trade,
    user_id: str,
    selected_card_ids: list[str] | None = None,
) -> None:
    """
    Accept a pending trade. Only the recipient may accept.

    Args:
        trade: Trade to accept
        user_id: User accepting the trade
        selected_card_ids: Ids of the wanted cards the recipient agrees to give.
            None or empty accepts every wanted card; otherwise wants is
            narrowed to the selection.

    Raises:
        TradeError: If the user is not the recipient, the trade is not pending,
            or the selection matches none of the wanted cards
    """
    if user_id != trade.recipient_id:
        raise TradeError("Only the recipient can accept a trade", status_code=403)

    accepted = trade.wants
    if selected_card_ids:
        selected = set(selected_card_ids)
        accepted = [item for item in trade.wants if item.card.id in selected]
        if not accepted:
            raise TradeError("None of the selected cards are part of this trade")

    _transition(trade, TradeStatus.PENDING, TradeStatus.ACCEPTED)
    trade.wants = list(accepted)


def decline_trade(trade: Trade, user_id: str) -> None:
    """Decline a pending trade. Only the recipient may decline."""
    if user_id != trade.recipient_id:
        raise TradeError("Only the recipient can decline a trade", status_code=403)
    _transition(trade, TradeStatus.PENDING, TradeStatus.DECLINED)


def complete_trade(trade: Trade) -> None:
    """Mark an accepted trade as completed."""
    _transition(trade, TradeStatus.ACCEPTED, TradeStatus.COMPLETED)


def can_cancel(trade: Trade, user_id: str) -> bool:
    """
    Check whether a user may cancel (withdraw) a trade.

    Only the initiator may cancel, and only while the trade is pending.
    The caller deletes the record when this returns True.
    """
    return user_id == trade.initiator_id and trade.status == TradeStatus.PENDING
