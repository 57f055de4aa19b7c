"""Portfolio read models: holdings and realized P&L."""

from .holdings_projector import HoldingsProjector, PriceLookup
from .realized_pnl_service import RealizedPnlService, summarize
from .valuation_types import ConsumedLot, HoldingView, RealizedRow, RealizedSummary

__all__ = [
    "ConsumedLot",
    "HoldingView",
    "HoldingsProjector",
    "PriceLookup",
    "RealizedPnlService",
    "RealizedRow",
    "RealizedSummary",
    "summarize",
]
