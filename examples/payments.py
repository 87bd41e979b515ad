"""
payments.py

Payment methods as registrations instead of PaymentManager methods.

Use case: a new payment method (MasterCard) ships as one new class and
one register() call. PaymentManager is never edited.
"""

from dataclasses import dataclass

from plugboard import (
    Capability,
    Dispatcher,
    Registry,
    UnsupportedOperationError,
    implements,
)


@dataclass(frozen=True)
class PaymentReceipt:
    """Outcome of one payment."""
    method: str
    amount: float


Payment = Capability(
    "Payment",
    operation="make_payment",
    parameters=["amount"],
    returns=PaymentReceipt,
    failures=[UnsupportedOperationError],
    postcondition=lambda receipt: receipt.amount > 0,
    description="Charge an amount using one payment method",
)


def _check_amount(method: str, amount: float) -> None:
    if amount <= 0:
        raise UnsupportedOperationError("make_payment", f"{method} cannot charge {amount}")


@implements(Payment)
class CashPayment:
    def make_payment(self, amount: float) -> PaymentReceipt:
        _check_amount("cash", amount)
        return PaymentReceipt(method="cash", amount=amount)


@implements(Payment)
class VisaPayment:
    # Per-transaction card limit
    limit = 5000.0

    def make_payment(self, amount: float) -> PaymentReceipt:
        _check_amount("visa", amount)
        if amount > self.limit:
            raise UnsupportedOperationError("make_payment", f"visa limit is {self.limit}")
        return PaymentReceipt(method="visa", amount=amount)


@implements(Payment)
class MasterCardPayment:
    def make_payment(self, amount: float) -> PaymentReceipt:
        _check_amount("mastercard", amount)
        return PaymentReceipt(method="mastercard", amount=amount)


class PaymentManager:
    """Takes payments through whichever method is registered first."""

    def __init__(self, dispatcher: Dispatcher):
        self.dispatcher = dispatcher

    def make_payment(self, amount: float) -> PaymentReceipt:
        return self.dispatcher.invoke(Payment, amount)


def build_payment_registry() -> Registry:
    """Registry with the v1 payment methods: cash, then visa."""
    registry = Registry()
    registry.register(Payment, CashPayment())
    registry.register(Payment, VisaPayment())
    return registry
