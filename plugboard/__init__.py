"""
Plugboard — Capability-Typed Dispatch
=====================================

Plugboard lets callers invoke behavior over a family of interchangeable
implementations without depending on their concrete types.

- **Capability**: a named contract for exactly one operation
- **Registry**: capability -> ordered implementations, add/remove/replace
- **Dispatcher**: resolves a capability and invokes the selected implementation
- **CompositeHolder**: one entity aggregating only the capabilities it has

Stability
---------
Everything exported in ``__all__`` is public. Symbols prefixed with an
underscore are internal and may change without notice.

Example
-------
::

    from plugboard import Capability, Dispatcher, Registry

    Payment = Capability("Payment", operation="make_payment", parameters=["amount"])

    registry = Registry()
    cash = registry.register(Payment, CashPayment())
    registry.register(Payment, VisaPayment())

    dispatcher = Dispatcher(registry)
    dispatcher.invoke(Payment, 10)     # handled by CashPayment
    registry.deregister(cash)
    dispatcher.invoke(Payment, 10)     # handled by VisaPayment
"""

__version__ = "1.0.0"

__all__ = [
    # --- Package Metadata ---
    "__version__",

    # --- Capability ---
    "Capability",
    "Parameter",
    "implements",
    "declared_capabilities",

    # --- Registry ---
    "Registry",
    "RegistrationHandle",
    "HandleState",
    "Resolution",

    # --- Dispatcher ---
    "Dispatcher",
    "DispatchOptions",
    "Selector",
    "first_registered",
    "last_registered",

    # --- CompositeHolder ---
    "CompositeHolder",
    "require",

    # --- Exceptions ---
    "PlugboardError",
    "InvalidCapabilityError",
    "TypeMismatchError",
    "NoImplementationAvailableError",
    "CapabilityNotSupportedError",
    "RegistrationNotFoundError",
    "ForeignHandleError",
    "ContractViolationError",
    "UnsupportedOperationError",
    "CapabilityImmutabilityError",
]

from plugboard.capability import (
    Capability,
    Parameter,
    declared_capabilities,
    implements,
)
from plugboard.config import (
    DispatchOptions,
    Selector,
    first_registered,
    last_registered,
)
from plugboard.dispatcher import Dispatcher
from plugboard.errors import (
    CapabilityImmutabilityError,
    CapabilityNotSupportedError,
    ContractViolationError,
    ForeignHandleError,
    InvalidCapabilityError,
    NoImplementationAvailableError,
    PlugboardError,
    RegistrationNotFoundError,
    TypeMismatchError,
    UnsupportedOperationError,
)
from plugboard.holder import CompositeHolder, require
from plugboard.registry import (
    HandleState,
    RegistrationHandle,
    Registry,
    Resolution,
)
