"""Checkout — корзина, расчёт доставки и атомарный checkout.

Компоненты:
- Cart: накопление покупок с валидацией против текущего остатка
- ShippingCalculator: вес посылки и стоимость доставки
- CheckoutOrchestrator: validate-then-settle транзакция и отчётность
- Catalog: поиск товаров по name, загрузка каталога из JSON
"""

from .cart import Cart, CartLine
from .catalog import (
    Catalog,
    UnknownProduct,
    customer_from_document,
    load_catalog,
    load_customer,
)
from .clock import Clock, FixedClock, SystemClock
from .errors import (
    CheckoutError,
    CheckoutFailure,
    EmptyCart,
    ExpiredProduct,
    FailureKind,
    InsufficientBalance,
    InsufficientStock,
    InvalidQuantity,
)
from .orchestrator import CheckoutOrchestrator, CheckoutResult, CheckoutTotals
from .presenters import (
    Receipt,
    ReceiptLine,
    ReceiptPresenter,
    RecordingPresenter,
    ShipmentPresenter,
    TextReceiptPresenter,
    TextShipmentPresenter,
)
from .shipping import (
    ShipmentManifest,
    ShipmentUnit,
    ShippingCalculator,
    ShippingConfig,
    ShippingQuote,
    collect_shipment_units,
)

__all__ = [
    # Cart
    "Cart",
    "CartLine",
    # Catalog
    "Catalog",
    "UnknownProduct",
    "customer_from_document",
    "load_catalog",
    "load_customer",
    # Clock
    "Clock",
    "FixedClock",
    "SystemClock",
    # Errors
    "CheckoutError",
    "CheckoutFailure",
    "EmptyCart",
    "ExpiredProduct",
    "FailureKind",
    "InsufficientBalance",
    "InsufficientStock",
    "InvalidQuantity",
    # Orchestrator
    "CheckoutOrchestrator",
    "CheckoutResult",
    "CheckoutTotals",
    # Presenters
    "Receipt",
    "ReceiptLine",
    "ReceiptPresenter",
    "RecordingPresenter",
    "ShipmentPresenter",
    "TextReceiptPresenter",
    "TextShipmentPresenter",
    # Shipping
    "ShipmentManifest",
    "ShipmentUnit",
    "ShippingCalculator",
    "ShippingConfig",
    "ShippingQuote",
    "collect_shipment_units",
]
