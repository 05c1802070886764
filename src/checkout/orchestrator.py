"""Checkout Orchestrator — атомарная транзакция validate-then-settle.

Порядок проверок (short-circuit на первом отказе, ничего не мутируется до
прохождения всех проверок):
1. Пустая корзина                          → EMPTY_CART
2. Для каждой строки (порядок корзины):
   - количество не целое положительное      → INVALID_QUANTITY(name)
   - товар просрочен                       → EXPIRED_PRODUCT(name)
   - запрошено больше живого остатка        → INSUFFICIENT_STOCK(name)
3. subtotal = Σ price × quantity
4. Доставка по единицам shippable товаров (ShippingCalculator)
5. total = subtotal + shipping_fee; balance < total → INSUFFICIENT_BALANCE
6. Settlement: списание остатков, списание баланса, очистка корзины
7. Отчётность: манифест посылки (если есть), затем чек

Остаток перепроверяется при checkout: корзина могла устареть с момента add().
Вся последовательность выполняется под process-local lock модуля (общим для
всех экземпляров CheckoutOrchestrator), поэтому два checkout в одном процессе
не пересекаются между проверкой остатка и его списанием, даже если идут через
разные оркестраторы.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from src.checkout.cart import Cart, CartLine, is_valid_quantity
from src.checkout.clock import Clock, SystemClock
from src.checkout.errors import (
    CheckoutError,
    CheckoutFailure,
    EmptyCart,
    ExpiredProduct,
    FailureKind,
    InsufficientBalance,
    InsufficientStock,
    InvalidQuantity,
)
from src.checkout.presenters import (
    Receipt,
    ReceiptLine,
    ReceiptPresenter,
    ShipmentPresenter,
)
from src.checkout.shipping import ShippingCalculator, ShippingQuote, collect_shipment_units
from src.core.domain import Customer, line_amount, reported_amount

logger = logging.getLogger(__name__)

# Общий для всех оркестраторов процесса: каталог (живые Product) разделяется
# между экземплярами, поэтому проверка остатка и списание сериализуются глобально.
_SETTLEMENT_LOCK = threading.RLock()


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class CheckoutTotals:
    """Вычисленные (не усечённые) суммы checkout."""

    subtotal: float
    shipping_fee: float
    total: float
    total_weight_kg: float


@dataclass(frozen=True)
class CheckoutResult:
    """Результат checkout: либо receipt, либо failure."""

    completed: bool
    failure: Optional[CheckoutFailure]

    receipt: Optional[Receipt]
    totals: Optional[CheckoutTotals]
    shipping: Optional[ShippingQuote]

    # Детали
    details: str

    @property
    def failure_kind(self) -> Optional[FailureKind]:
        return self.failure.kind if self.failure else None


# =============================================================================
# ORCHESTRATOR
# =============================================================================


class CheckoutOrchestrator:
    """Checkout: Cart + Shipping Calculator + Customer balance → Receipt."""

    def __init__(
        self,
        receipt_presenter: ReceiptPresenter,
        shipment_presenter: ShipmentPresenter,
        clock: Clock | None = None,
        shipping_calculator: ShippingCalculator | None = None,
    ):
        """
        Args:
            receipt_presenter: получатель чека
            shipment_presenter: получатель манифеста посылки
            clock: источник текущего момента (default: SystemClock)
            shipping_calculator: калькулятор доставки (default: тариф 3 за 100 г)
        """
        self.receipt_presenter = receipt_presenter
        self.shipment_presenter = shipment_presenter
        self.clock = clock or SystemClock()
        self.shipping_calculator = shipping_calculator or ShippingCalculator()

    def checkout(self, customer: Customer, cart: Cart) -> CheckoutResult:
        """
        Checkout корзины покупателя.

        Args:
            customer: покупатель (баланс списывается при успехе)
            cart: корзина (очищается при успехе, не трогается при отказе)

        Returns:
            CheckoutResult с receipt при успехе или failure при отказе
        """
        with _SETTLEMENT_LOCK:
            try:
                return self._checkout(customer, cart)
            except CheckoutError as e:
                logger.warning(
                    "Checkout refused for %s: %s (%s)",
                    customer.name,
                    e.kind.value,
                    e.message,
                )
                return CheckoutResult(
                    completed=False,
                    failure=e.to_failure(),
                    receipt=None,
                    totals=None,
                    shipping=None,
                    details=e.message,
                )

    def _checkout(self, customer: Customer, cart: Cart) -> CheckoutResult:
        # 1. Пустая корзина
        if cart.is_empty():
            raise EmptyCart()

        lines = cart.lines

        # 2. Построчная перепроверка срока годности и живого остатка
        now = self.clock.now()
        for line in lines:
            self._validate_line(line, now)

        # 3. Subtotal
        subtotal = sum(line_amount(line.product.price, line.quantity) for line in lines)

        # 4. Доставка
        quote = self.shipping_calculator.quote(collect_shipment_units(lines))

        # 5. Баланс
        total = subtotal + quote.shipping_fee
        if not customer.can_afford(total):
            raise InsufficientBalance(required=total, balance=customer.balance)

        # 6. Settlement (все инварианты проверены выше; баланс списывается после остатков)
        for line in lines:
            line.product.reduce_quantity(line.quantity)
        customer.deduct_balance(total)
        cart.clear()

        totals = CheckoutTotals(
            subtotal=subtotal,
            shipping_fee=quote.shipping_fee,
            total=total,
            total_weight_kg=quote.total_weight_kg,
        )
        receipt = Receipt(
            customer_name=customer.name,
            lines=tuple(
                ReceiptLine(
                    name=line.name,
                    quantity=line.quantity,
                    amount=reported_amount(line_amount(line.product.price, line.quantity)),
                )
                for line in lines
            ),
            subtotal=reported_amount(subtotal),
            shipping=reported_amount(quote.shipping_fee),
            total=reported_amount(total),
            balance=reported_amount(customer.balance),
        )

        # 7. Отчётность
        if quote.manifest is not None:
            self.shipment_presenter.present_shipment(quote.manifest)
        self.receipt_presenter.present_receipt(receipt)

        logger.info(
            "Checkout completed for %s: subtotal=%.2f shipping=%.2f total=%.2f balance=%.2f",
            customer.name,
            subtotal,
            quote.shipping_fee,
            total,
            customer.balance,
        )

        return CheckoutResult(
            completed=True,
            failure=None,
            receipt=receipt,
            totals=totals,
            shipping=quote,
            details=f"PASS: {len(lines)} lines, total={total:.2f}",
        )

    def _validate_line(self, line: CartLine, now: datetime) -> None:
        """
        Перепроверка строки против живого состояния товара.

        Raises:
            InvalidQuantity: количество не целое положительное
            ExpiredProduct: товар просрочен на момент now
            InsufficientStock: запрошено больше текущего остатка
        """
        product = line.product
        if not is_valid_quantity(line.quantity):
            raise InvalidQuantity(line.quantity, product.name)

        if product.is_expired(now):
            raise ExpiredProduct(product.name)

        if line.quantity > product.quantity:
            raise InsufficientStock(product.name, line.quantity, product.quantity)

        logger.debug("Checkout line ok: %s x%d (stock %d)", product.name, line.quantity, product.quantity)
