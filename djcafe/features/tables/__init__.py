"""Table management: tables, order lines and payment status."""

from djcafe.features.tables.models import DiningTable, PaymentStatus, TableOrder, TableStatus
from djcafe.features.tables.routes import router
from djcafe.features.tables.service import TableService

__all__ = [
    "DiningTable",
    "PaymentStatus",
    "TableOrder",
    "TableService",
    "TableStatus",
    "router",
]
