"""Protocol interfaces for the collateral ledger engine."""
from .access_control import AccessControl
from .asset_transfer import AssetTransfer
from .event_sink import EventSink
from .notifier import Notifier
from .price_oracle import PriceOracle

__all__ = ["AccessControl", "AssetTransfer", "EventSink", "Notifier", "PriceOracle"]
