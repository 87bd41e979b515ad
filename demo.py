"""
demo.py

Minimal CLI demo for Plugboard.
- Takes a payment through the first registered method, then swaps methods
- Shows a robot being skipped at lunch because it is not Feedable
"""

import logging

from plugboard import Dispatcher, Registry

from examples.payments import MasterCardPayment, Payment, PaymentManager, build_payment_registry
from examples.workers import Employee, Employer, lunch_break, make_human, make_robot


def main():
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # --- Payments: open for extension, closed for modification ---
    registry = build_payment_registry()
    manager = PaymentManager(Dispatcher(registry))
    print(manager.make_payment(10))

    cash = registry.entries(Payment)[0]
    registry.deregister(cash)
    print(manager.make_payment(10))

    visa = registry.entries(Payment)[0]
    registry.replace(Payment, visa, MasterCardPayment())
    print(manager.make_payment(10))

    # --- Workers: narrow capabilities ---
    holders = [make_human("alice"), make_robot("r2")]
    print("\nLunch:", lunch_break(holders))

    employer = Employer(Registry())
    employer.hire(Employee("bob"))
    for holder in holders:
        holder.register_into(employer.registry)
    print("Work:", employer.manage())


if __name__ == "__main__":
    main()
