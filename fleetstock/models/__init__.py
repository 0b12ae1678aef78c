# fleetstock/models/__init__.py
from .inventory import InventoryItem, StockStatus
from .issuance import IssuanceRecord
from .replacement import EquipmentReplacement, ReplacementSource, Disposition, ReplacementStatus
from .ledger import Expense, WarehouseHolding
from .outbox import OutboxEvent

# Export all models
__all__ = [
    "InventoryItem",
    "StockStatus",
    "IssuanceRecord",
    "EquipmentReplacement",
    "ReplacementSource",
    "Disposition",
    "ReplacementStatus",
    "Expense",
    "WarehouseHolding",
    "OutboxEvent",
]
