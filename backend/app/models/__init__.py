from .stalls import (
    Stall, StallStock, StallStatusHistory, StockStatusHistory, STALL_STATUSES, STOCK_STATUSES,
)
from .auth import Profile
from .sales import Sale, Expense
from .menu import MenuItem
from .security import AuditLog

__all__ = [
    'Stall', 'StallStock', 'StallStatusHistory', 'StockStatusHistory', 'STALL_STATUSES', 'STOCK_STATUSES',
    'Profile',
    'Sale', 'Expense',
    'MenuItem',
    'AuditLog',
]
