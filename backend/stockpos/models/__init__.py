from .inventory import Item, StockHistoryRecord
from .sales import Order, OrderLine
from .settings import Setting
from .auth import User

__all__ = [
    'Item', 'StockHistoryRecord',
    'Order', 'OrderLine',
    'Setting',
    'User',
]
