"""Unit тесты для CheckoutOrchestrator.

Coverage:
- Успешный checkout: суммы, доставка, settlement, отчётность
- EMPTY_CART / EXPIRED_PRODUCT / INSUFFICIENT_STOCK / INSUFFICIENT_BALANCE
- Отказ никогда не мутирует остаток, баланс и корзину
- Short-circuit на первой неуспешной строке в порядке корзины
- Перепроверка устаревшей корзины против живого остатка
- Усечение отчётных сумм
- Логирование
"""

import io
import logging
import threading
from datetime import datetime, timedelta, timezone

import pytest

from src.checkout import (
    Cart,
    CheckoutOrchestrator,
    FailureKind,
    FixedClock,
    InvalidQuantity,
    RecordingPresenter,
    TextReceiptPresenter,
    TextShipmentPresenter,
)
from src.core.domain import Customer, Product

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class OrderedPresenter(RecordingPresenter):
    """Presenter, фиксирующий порядок вызовов."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def present_receipt(self, receipt):
        self.calls.append("receipt")
        super().present_receipt(receipt)

    def present_shipment(self, manifest):
        self.calls.append("shipment")
        super().present_shipment(manifest)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def presenter():
    return OrderedPresenter()


@pytest.fixture
def orchestrator(clock, presenter):
    """Fixture для оркестратора с записывающим presenter."""
    return CheckoutOrchestrator(
        receipt_presenter=presenter,
        shipment_presenter=presenter,
        clock=clock,
    )


@pytest.fixture
def cheese():
    return Product(
        name="Cheese", price=100.0, quantity=5, expires_at=NOW + timedelta(days=30), weight_kg=0.4
    )


@pytest.fixture
def biscuits():
    return Product(
        name="Biscuits", price=150.0, quantity=2, expires_at=NOW + timedelta(days=30), weight_kg=0.7
    )


@pytest.fixture
def scratch_card():
    return Product(name="ScratchCard", price=50.0, quantity=20)


@pytest.fixture
def customer():
    return Customer(name="Ali", balance=1000.0)


@pytest.fixture
def cart(clock):
    return Cart(clock=clock)


def snapshot(customer, cart, *products):
    """Состояние всех трёх мутируемых ресурсов."""
    return (
        customer.balance,
        tuple(p.quantity for p in products),
        tuple((line.name, line.quantity) for line in cart.lines),
    )


# =============================================================================
# SUCCESS
# =============================================================================


class TestSuccessfulCheckout:
    """Сценарий A: Cheese × 2 + ScratchCard × 1."""

    def test_totals(self, orchestrator, customer, cart, cheese, scratch_card):
        cart.add(cheese, 2)
        cart.add(scratch_card, 1)

        result = orchestrator.checkout(customer, cart)

        assert result.completed is True
        assert result.failure is None
        assert result.failure_kind is None
        assert result.totals.subtotal == 250
        assert result.totals.total_weight_kg == pytest.approx(0.8)
        assert result.totals.shipping_fee == 24
        assert result.totals.total == 274
        assert "PASS" in result.details

    def test_settlement(self, orchestrator, customer, cart, cheese, scratch_card):
        cart.add(cheese, 2)
        cart.add(scratch_card, 1)

        orchestrator.checkout(customer, cart)

        assert customer.balance == 726.0
        assert cheese.quantity == 3
        assert scratch_card.quantity == 19
        assert cart.is_empty()

    def test_receipt(self, orchestrator, presenter, customer, cart, cheese, scratch_card):
        cart.add(cheese, 2)
        cart.add(scratch_card, 1)

        result = orchestrator.checkout(customer, cart)
        receipt = result.receipt

        assert presenter.receipts == [receipt]
        assert receipt.customer_name == "Ali"
        assert [(line.name, line.quantity, line.amount) for line in receipt.lines] == [
            ("Cheese", 2, 200),
            ("ScratchCard", 1, 50),
        ]
        assert (receipt.subtotal, receipt.shipping, receipt.total, receipt.balance) == (
            250,
            24,
            274,
            726,
        )

    def test_shipment_before_receipt(self, orchestrator, presenter, customer, cart, cheese, scratch_card):
        cart.add(cheese, 2)
        cart.add(scratch_card, 1)

        result = orchestrator.checkout(customer, cart)

        assert presenter.calls == ["shipment", "receipt"]
        manifest = presenter.shipments[0]
        assert manifest is result.shipping.manifest
        assert manifest.summary == (("Cheese", 2),)
        assert manifest.unit_weights_g == (400, 400)
        assert manifest.total_weight_kg == 0.8

    def test_no_shipment_without_shippable_items(self, orchestrator, presenter, customer, cart, scratch_card):
        cart.add(scratch_card, 3)

        result = orchestrator.checkout(customer, cart)

        assert result.completed
        assert presenter.calls == ["receipt"]
        assert result.totals.shipping_fee == 0
        assert result.receipt.total == 150

    def test_exact_balance_is_enough(self, orchestrator, cart, cheese, scratch_card):
        customer = Customer(name="Ali", balance=274.0)
        cart.add(cheese, 2)
        cart.add(scratch_card, 1)

        result = orchestrator.checkout(customer, cart)

        assert result.completed
        assert customer.balance == 0.0
        assert result.receipt.balance == 0

    def test_noisy_total_matches_exact_balance(self, orchestrator, cart):
        """0.1 + 0.2 = 0.30000000000000004 при балансе 0.3 проходит"""
        customer = Customer(name="Ali", balance=0.3)
        cart.add(Product(name="Gum", price=0.1, quantity=5), 1)
        cart.add(Product(name="Mint", price=0.2, quantity=5), 1)

        result = orchestrator.checkout(customer, cart)

        assert result.completed
        assert result.totals.total > 0.3
        assert customer.balance == 0.0
        assert result.receipt.balance == 0

    def test_amounts_truncated_not_rounded(self, orchestrator, customer, cart):
        """33.33 × 3 = 99.99 → 99"""
        product = Product(name="Voucher", price=33.33, quantity=10)
        cart.add(product, 3)

        result = orchestrator.checkout(customer, cart)

        assert result.receipt.lines[0].amount == 99
        assert result.receipt.subtotal == 99
        assert result.receipt.total == 99
        assert result.receipt.balance == 900
        assert customer.balance == pytest.approx(900.01)

    def test_shipping_counts_every_unit(self, orchestrator, customer, cart, cheese, biscuits):
        cart.add(cheese, 2)
        cart.add(biscuits, 1)

        result = orchestrator.checkout(customer, cart)

        assert result.shipping.unit_count == 3
        assert result.totals.total_weight_kg == pytest.approx(1.5)
        assert result.totals.shipping_fee == 45
        assert result.receipt.total == 350 + 45

    def test_text_presenters_end_to_end(self, clock, customer, cart, cheese, biscuits, scratch_card):
        stream = io.StringIO()
        orchestrator = CheckoutOrchestrator(
            receipt_presenter=TextReceiptPresenter(stream),
            shipment_presenter=TextShipmentPresenter(stream),
            clock=clock,
        )
        cart.add(cheese, 2)
        cart.add(biscuits, 1)
        cart.add(scratch_card, 1)

        orchestrator.checkout(customer, cart)

        assert stream.getvalue() == (
            "** Shipment notice **\n"
            "2x Cheese\n"
            "1x Biscuits\n"
            "400g\n"
            "400g\n"
            "700g\n"
            "Total package weight 1.5kg\n"
            "** Checkout receipt **\n"
            "2x Cheese      200\n"
            "1x Biscuits    150\n"
            "1x ScratchCard 50\n"
            "----------------------\n"
            "Subtotal         400\n"
            "Shipping         45\n"
            "Amount           445\n"
            "Balance          555\n"
            "END.\n\n"
        )


# =============================================================================
# FAILURES
# =============================================================================


class TestFailedCheckout:
    """Отказы: структурированный результат, никаких мутаций."""

    def test_empty_cart(self, orchestrator, presenter, customer, cart):
        result = orchestrator.checkout(customer, cart)

        assert result.completed is False
        assert result.failure_kind == FailureKind.EMPTY_CART
        assert result.failure.product_name is None
        assert result.receipt is None
        assert customer.balance == 1000.0
        assert presenter.calls == []

    def test_expired_product(self, orchestrator, presenter, clock, customer, cart, cheese):
        """Сценарий B: товар просрочился между add и checkout."""
        cart.add(cheese, 1)
        clock.advance(timedelta(days=31))
        before = snapshot(customer, cart, cheese)

        result = orchestrator.checkout(customer, cart)

        assert result.failure_kind == FailureKind.EXPIRED_PRODUCT
        assert result.failure.product_name == "Cheese"
        assert result.failure.message == "Cheese is expired"
        assert snapshot(customer, cart, cheese) == before
        assert presenter.calls == []

    def test_insufficient_balance(self, orchestrator, cart, cheese, scratch_card):
        """Сценарий C: баланс 10, total 274."""
        customer = Customer(name="Ali", balance=10.0)
        cart.add(cheese, 2)
        cart.add(scratch_card, 1)
        before = snapshot(customer, cart, cheese, scratch_card)

        result = orchestrator.checkout(customer, cart)

        assert result.failure_kind == FailureKind.INSUFFICIENT_BALANCE
        assert result.failure.product_name is None
        assert snapshot(customer, cart, cheese, scratch_card) == before

    def test_shipping_fee_tips_over_balance(self, orchestrator, cart, cheese):
        """Subtotal 200 покрыт балансом, но 200 + 24 — нет."""
        customer = Customer(name="Ali", balance=223.99)
        cart.add(cheese, 2)

        result = orchestrator.checkout(customer, cart)

        assert result.failure_kind == FailureKind.INSUFFICIENT_BALANCE
        assert cheese.quantity == 5

    def test_stale_cart_revalidated(self, orchestrator, customer, cart, cheese):
        """Сценарий D: остаток обнулён после add."""
        cart.add(cheese, 1)
        cheese.reduce_quantity(5)
        before = snapshot(customer, cart, cheese)

        result = orchestrator.checkout(customer, cart)

        assert result.failure_kind == FailureKind.INSUFFICIENT_STOCK
        assert result.failure.product_name == "Cheese"
        assert result.failure.message == "Not enough stock for Cheese"
        assert snapshot(customer, cart, cheese) == before

    def test_competing_carts(self, orchestrator, clock, customer, cheese):
        """Вторая корзина на тот же остаток проигрывает при checkout."""
        first, second = Cart(clock=clock), Cart(clock=clock)
        first.add(cheese, 4)
        second.add(cheese, 3)

        assert orchestrator.checkout(customer, first).completed
        result = orchestrator.checkout(customer, second)

        assert result.failure_kind == FailureKind.INSUFFICIENT_STOCK
        assert cheese.quantity == 1
        assert second.quantity_of("Cheese") == 3

    def test_short_circuits_at_first_failing_line(self, orchestrator, clock, customer, cart, scratch_card):
        """Порядок корзины: первая неуспешная строка определяет отказ."""
        low_stock = Product(name="TV", price=150.0, quantity=2, weight_kg=7.0)
        perishable = Product(
            name="Milk", price=20.0, quantity=5, expires_at=NOW + timedelta(hours=1)
        )
        cart.add(scratch_card, 1)
        cart.add(low_stock, 2)
        cart.add(perishable, 1)

        low_stock.reduce_quantity(1)
        clock.advance(timedelta(hours=2))
        before = snapshot(customer, cart, scratch_card, low_stock, perishable)

        result = orchestrator.checkout(customer, cart)

        assert result.failure_kind == FailureKind.INSUFFICIENT_STOCK
        assert result.failure.product_name == "TV"
        assert snapshot(customer, cart, scratch_card, low_stock, perishable) == before

    def test_expiry_checked_before_stock_on_same_line(self, orchestrator, clock, customer, cart):
        product = Product(
            name="Milk", price=20.0, quantity=5, expires_at=NOW + timedelta(hours=1)
        )
        cart.add(product, 5)
        product.reduce_quantity(5)
        clock.advance(timedelta(hours=2))

        result = orchestrator.checkout(customer, cart)

        assert result.failure_kind == FailureKind.EXPIRED_PRODUCT

    @pytest.mark.parametrize("quantity", [1.5, True])
    def test_non_integer_quantity_never_charges(self, orchestrator, presenter, customer, cart, cheese, quantity):
        """Нецелое количество отклоняется при add, до списания баланса."""
        with pytest.raises(InvalidQuantity):
            cart.add(cheese, quantity)

        result = orchestrator.checkout(customer, cart)

        assert result.failure_kind == FailureKind.EMPTY_CART
        assert customer.balance == 1000.0
        assert cheese.quantity == 5
        assert presenter.calls == []

    def test_cart_usable_after_failure(self, orchestrator, cart, cheese):
        customer = Customer(name="Ali", balance=10.0)
        cart.add(cheese, 2)
        assert not orchestrator.checkout(customer, cart).completed

        customer.balance = 1000.0
        result = orchestrator.checkout(customer, cart)

        assert result.completed
        assert cheese.quantity == 3


# =============================================================================
# LOGGING & CONCURRENCY
# =============================================================================


def test_refusal_logged(orchestrator, customer, cart, caplog):
    with caplog.at_level(logging.WARNING, logger="src.checkout.orchestrator"):
        orchestrator.checkout(customer, cart)

    assert "Checkout refused for Ali: empty_cart" in caplog.text


def test_completion_logged(orchestrator, customer, cart, scratch_card, caplog):
    cart.add(scratch_card, 1)

    with caplog.at_level(logging.INFO, logger="src.checkout.orchestrator"):
        orchestrator.checkout(customer, cart)

    assert "Checkout completed for Ali" in caplog.text


def test_concurrent_checkouts_never_oversell(orchestrator, clock):
    """Последняя единица достаётся ровно одному checkout."""
    product = Product(name="Console", price=10.0, quantity=1)
    carts = [Cart(clock=clock) for _ in range(8)]
    for cart in carts:
        cart.add(product, 1)
    customers = [Customer(name=f"C{i}", balance=100.0) for i in range(8)]
    results = []
    barrier = threading.Barrier(len(carts))

    def run(customer, cart):
        barrier.wait()
        results.append(orchestrator.checkout(customer, cart))

    threads = [threading.Thread(target=run, args=pair) for pair in zip(customers, carts)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(r.completed for r in results) == 1
    assert product.quantity == 0
    assert all(
        r.failure_kind == FailureKind.INSUFFICIENT_STOCK for r in results if not r.completed
    )


def test_separate_orchestrators_share_settlement_lock(clock):
    """Два оркестратора над одним каталогом не продают последнюю единицу дважды."""
    product = Product(name="Console", price=10.0, quantity=1)
    orchestrators = [
        CheckoutOrchestrator(
            receipt_presenter=RecordingPresenter(),
            shipment_presenter=RecordingPresenter(),
            clock=clock,
        )
        for _ in range(2)
    ]
    carts = [Cart(clock=clock) for _ in range(8)]
    for cart in carts:
        cart.add(product, 1)
    customers = [Customer(name=f"C{i}", balance=100.0) for i in range(8)]
    results = []
    barrier = threading.Barrier(len(carts))

    def run(index):
        barrier.wait()
        orchestrator = orchestrators[index % len(orchestrators)]
        results.append(orchestrator.checkout(customers[index], carts[index]))

    threads = [threading.Thread(target=run, args=(i,)) for i in range(len(carts))]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(r.completed for r in results) == 1
    assert product.quantity == 0
    assert sum(c.balance for c in customers) == 790.0
