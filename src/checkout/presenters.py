"""Presenters — отчётность checkout: чек и уведомление об отправке.

Presenter только отображает уже вычисленные значения и ничего не пересчитывает:
суммы в чеке и веса в манифесте — ровно те, что списаны и отправлены.
"""

from dataclasses import dataclass
from typing import List, Protocol, TextIO, Tuple

from src.checkout.shipping import ShipmentManifest


# =============================================================================
# RECEIPT
# =============================================================================


@dataclass(frozen=True)
class ReceiptLine:
    """Строка чека: товар, количество, усечённая сумма строки."""

    name: str
    quantity: int
    amount: int


@dataclass(frozen=True)
class Receipt:
    """Чек: все суммы — усечённые целые."""

    customer_name: str
    lines: Tuple[ReceiptLine, ...]
    subtotal: int
    shipping: int
    total: int
    balance: int


# =============================================================================
# PROTOCOLS
# =============================================================================


class ReceiptPresenter(Protocol):
    def present_receipt(self, receipt: Receipt) -> None:
        ...


class ShipmentPresenter(Protocol):
    def present_shipment(self, manifest: ShipmentManifest) -> None:
        ...


# =============================================================================
# TEXT PRESENTERS
# =============================================================================

RECEIPT_NAME_WIDTH = 12
RECEIPT_LABEL_WIDTH = 17
RECEIPT_SEPARATOR = "-" * 22


class TextShipmentPresenter:
    """Консольный формат уведомления об отправке."""

    def __init__(self, stream: TextIO):
        self._stream = stream

    def present_shipment(self, manifest: ShipmentManifest) -> None:
        write = self._stream.write
        write("** Shipment notice **\n")
        for name, count in manifest.summary:
            write(f"{count}x {name}\n")
        for grams in manifest.unit_weights_g:
            write(f"{grams}g\n")
        write(f"Total package weight {manifest.total_weight_kg:.1f}kg\n")


class TextReceiptPresenter:
    """Консольный формат чека."""

    def __init__(self, stream: TextIO):
        self._stream = stream

    def present_receipt(self, receipt: Receipt) -> None:
        write = self._stream.write
        write("** Checkout receipt **\n")
        for line in receipt.lines:
            write(f"{line.quantity}x {line.name:<{RECEIPT_NAME_WIDTH}}{line.amount}\n")
        write(f"{RECEIPT_SEPARATOR}\n")
        for label, value in (
            ("Subtotal", receipt.subtotal),
            ("Shipping", receipt.shipping),
            ("Amount", receipt.total),
            ("Balance", receipt.balance),
        ):
            write(f"{label:<{RECEIPT_LABEL_WIDTH}}{value}\n")
        write("END.\n\n")


class RecordingPresenter:
    """Presenter, сохраняющий всё переданное (для тестов и программных клиентов)."""

    def __init__(self):
        self.receipts: List[Receipt] = []
        self.shipments: List[ShipmentManifest] = []

    def present_receipt(self, receipt: Receipt) -> None:
        self.receipts.append(receipt)

    def present_shipment(self, manifest: ShipmentManifest) -> None:
        self.shipments.append(manifest)
