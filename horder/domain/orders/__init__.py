from horder.domain.orders.aggregates import Order, OrderItem, OrderStatus, RefundInfo

__all__ = [
    "Order",
    "OrderItem",
    "OrderStatus",
    "RefundInfo",
]
