from .notification import NotificationLog
from .order import Order, OrderItem
from .setting import StoreSetting
from .user import User

__all__ = [
    "Order",
    "OrderItem",
    "User",
    "StoreSetting",
    "NotificationLog",
]
