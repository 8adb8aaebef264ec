from cardbinder.models.binder import Binder, Page, Slot
from cardbinder.models.card import Card
from cardbinder.models.failure import (
    BinderNotFoundError,
    FailureDetail,
    FailureKind,
    KnownError,
    LayoutError,
    TradeError,
)
from cardbinder.models.import_row import RawImportRow, RowFailure
from cardbinder.models.printing import Printing
from cardbinder.models.trade import (
    Trade,
    TradeItem,
    TradeStatus,
    accept_trade,
    can_cancel,
    complete_trade,
    create_trade,
    decline_trade,
)

__all__ = [
    "Binder",
    "BinderNotFoundError",
    "Card",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "LayoutError",
    "Page",
    "Printing",
    "RawImportRow",
    "RowFailure",
    "Slot",
    "Trade",
    "TradeError",
    "TradeItem",
    "TradeStatus",
    "accept_trade",
    "can_cancel",
    "complete_trade",
    "create_trade",
    "decline_trade",
]
