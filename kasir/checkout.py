"""Checkout state machine: Building -> AwaitingPayment -> Committed -> Building."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable
from uuid import uuid4

from kasir import cart as cart_ops
from kasir.constant import CASH
from kasir.errors import InsufficientPayment, InvalidTransition, ValidationError
from kasir.log import get_logger
from kasir.models import PricedTotals, SaleRecord, Settlement, ShopSettings
from kasir.notify import Customer, Notifier
from kasir.pricing import compute_change, compute_totals
from kasir.sales_log import outlet_zone
from kasir.state import AppState, persist_sale

logger = get_logger(__name__)

DRAFT_ID = "DRAFT"

ReceiptSink = Callable[[SaleRecord, ShopSettings], None]


class CheckoutState(str, Enum):
    BUILDING = "building"
    AWAITING_PAYMENT = "awaiting_payment"
    COMMITTED = "committed"


@dataclass(frozen=True)
class CommitResult:
    record: SaleRecord
    persisted: bool
    notified: bool
    receipt_error: str | None = None


def _default_clock() -> datetime:
    return datetime.now(outlet_zone())


class Checkout:
    """Drives the active cart of ``app`` through payment into the sales log."""

    def __init__(
        self,
        app: AppState,
        on_receipt: ReceiptSink | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = _default_clock,
    ) -> None:
        self.app = app
        self.on_receipt = on_receipt
        self.notifier = notifier
        self.clock = clock
        self.state = CheckoutState.BUILDING

    def totals(self) -> PricedTotals:
        return compute_totals(self.app.cart, self.app.settings)

    def settlement(self, totals: PricedTotals | None = None) -> Settlement:
        totals = totals or self.totals()
        cart = self.app.cart
        return compute_change(cart.pay_method, cart.cash_tendered, totals.total)

    def open_payment(self) -> PricedTotals:
        if self.state != CheckoutState.BUILDING:
            raise InvalidTransition(f"Cannot open payment while {self.state.value}")
        if self.app.cart.is_empty:
            raise ValidationError("Cart is empty")
        totals = self.totals()
        if self.app.cart.pay_method == CASH:
            # Convenience default only; the cashier may still edit it.
            cart_ops.set_cash_tendered(self.app.cart, totals.total)
        self.state = CheckoutState.AWAITING_PAYMENT
        logger.info(f"payment_open total={totals.total} method={self.app.cart.pay_method}")
        return totals

    def cancel_payment(self) -> None:
        if self.state != CheckoutState.AWAITING_PAYMENT:
            raise InvalidTransition(f"Cannot cancel payment while {self.state.value}")
        self.state = CheckoutState.BUILDING
        logger.info("payment_cancel")

    def commit(self, customer: Customer | None = None) -> CommitResult:
        """Turn the cart into a SaleRecord, log it, print it and reset the cart.

        Every check runs before the log is touched, so a failure leaves both
        cart and log unchanged. Collaborator failures after the append are
        reported in the result, never raised.
        """
        if self.state != CheckoutState.AWAITING_PAYMENT:
            raise InvalidTransition(f"Cannot commit while {self.state.value}")
        cart = self.app.cart
        if cart.is_empty:
            raise ValidationError("Cart is empty")

        totals = self.totals()
        if cart.pay_method == CASH and cart.cash_tendered < totals.total:
            logger.info(f"commit_rejected reason=insufficient total={totals.total} cash={cart.cash_tendered}")
            raise InsufficientPayment(total=totals.total, tendered=cart.cash_tendered)

        record = self._materialize(self._new_sale_id(), totals, self.settlement(totals))
        self.app.sales_log.append(record)
        self.state = CheckoutState.COMMITTED
        logger.info(f"commit_ok sale_id={record.id} total={record.total} change={record.change}")

        try:
            persisted = persist_sale(self.app, record)
            receipt_error = self._emit_receipt(record)
            notified = self._notify(record, customer)
        finally:
            cart_ops.clear(cart)
            self.state = CheckoutState.BUILDING
        return CommitResult(record=record, persisted=persisted, notified=notified, receipt_error=receipt_error)

    def draft(self) -> SaleRecord:
        """Preview of the current cart shaped like a sale. Never logged."""
        totals = self.totals()
        return self._materialize(DRAFT_ID, totals, self.settlement(totals))

    def print_draft(self) -> str | None:
        return self._emit_receipt(self.draft())

    def _emit_receipt(self, record: SaleRecord) -> str | None:
        if self.on_receipt is None:
            return None
        try:
            self.on_receipt(record, self.app.settings)
        except Exception as exc:
            logger.warning(f"receipt_failed sale_id={record.id} error={exc!r}")
            return str(exc)
        return None

    def _notify(self, record: SaleRecord, customer: Customer | None) -> bool:
        if self.notifier is None:
            return False
        try:
            return self.notifier.notify_sale(record, self.app.settings.shop_name, customer=customer)
        except Exception as exc:
            logger.warning(f"notify_failed sale_id={record.id} error={exc!r}")
            return False

    def _new_sale_id(self) -> str:
        now = self.clock()
        while True:
            sale_id = f"CM-{now:%Y%m}-{uuid4().hex[:7].upper()}"
            if sale_id not in self.app.sales_log:
                return sale_id

    def _materialize(self, sale_id: str, totals: PricedTotals, settlement: Settlement) -> SaleRecord:
        cart = self.app.cart
        settings = self.app.settings
        now = self.clock()
        return SaleRecord(
            id=sale_id,
            created_at=now.strftime("%d/%m/%Y %H:%M:%S"),
            timestamp_ms=int(now.timestamp() * 1000),
            lines=tuple(cart.lines),
            subtotal=totals.subtotal,
            discount_amount=totals.discount,
            tax_rate_applied=settings.tax_rate_percent if cart.include_tax else 0,
            service_rate_applied=settings.service_rate_percent if cart.include_service else 0,
            tax=totals.tax,
            service=totals.service,
            total=totals.total,
            pay_method=cart.pay_method,
            cash_tendered=settlement.effective_cash,
            change=settlement.change,
        )
