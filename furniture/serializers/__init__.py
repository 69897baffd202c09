from .order_serializers import (
    CheckoutSummaryRequestSerializer,
    CheckoutSummarySerializer,
    LineItemInputSerializer,
    OrderCreateSerializer,
    OrderDetailSerializer,
    OrderItemSerializer,
    OrderListSerializer,
    OrderStatusCountSerializer,
    OrderStatusUpdateSerializer,
)
from .setting_serializers import SettingKeyQuerySerializer, StoreSettingSerializer
from .shipping_serializers import (
    AddressField,
    ShippingQuoteRequestSerializer,
    ShippingQuoteSerializer,
    ShippingSettingsSerializer,
)

__all__ = [
    # Order
    "CheckoutSummaryRequestSerializer",
    "CheckoutSummarySerializer",
    "LineItemInputSerializer",
    "OrderCreateSerializer",
    "OrderDetailSerializer",
    "OrderItemSerializer",
    "OrderListSerializer",
    "OrderStatusCountSerializer",
    "OrderStatusUpdateSerializer",
    # Setting
    "SettingKeyQuerySerializer",
    "StoreSettingSerializer",
    # Shipping
    "AddressField",
    "ShippingQuoteRequestSerializer",
    "ShippingQuoteSerializer",
    "ShippingSettingsSerializer",
]
