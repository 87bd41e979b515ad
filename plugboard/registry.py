"""
registry.py

Plugboard Registry — maps a Capability to its ordered implementations.

Design Invariants:
- Entries within one capability resolve in (order, registration sequence)
  order; with the default order this is registration order
- A failed register/replace leaves the registry unchanged
- Deregistration is idempotent
- Handles move REGISTERED -> DEREGISTERED and never back
- Mutations are serialized under one lock and publish a new immutable
  tuple per capability, so resolve() always sees a whole snapshot
"""

import itertools
import logging
import threading
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, overload

from plugboard.capability import Capability, validate_capability
from plugboard.errors import (
    ForeignHandleError,
    InvalidCapabilityError,
    RegistrationNotFoundError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Handle State
# =============================================================================

class HandleState(Enum):
    """Lifecycle state of a RegistrationHandle."""
    REGISTERED = "registered"
    DEREGISTERED = "deregistered"


# =============================================================================
# RegistrationHandle
# =============================================================================

class RegistrationHandle:
    """
    Receipt for one registration entry.

    Handles are issued by Registry.register() and Registry.replace(). They
    hold a reference to the implementation for as long as the entry is
    registered; the registry does not own the implementation.

    Attributes:
        capability: Capability the entry is registered under
        implementation: The registered implementation
        order: Sort key; lower resolves first
        sequence: Registry-wide registration counter
        state: HandleState
    """

    __slots__ = ('_registry', '_capability', '_implementation', '_order', '_sequence', '_state')

    def __init__(
        self,
        registry: "Registry",
        capability: Capability,
        implementation: Any,
        order: int,
        sequence: int,
    ):
        self._registry = registry
        self._capability = capability
        self._implementation = implementation
        self._order = order
        self._sequence = sequence
        self._state = HandleState.REGISTERED

    @property
    def capability(self) -> Capability:
        return self._capability

    @property
    def implementation(self) -> Any:
        return self._implementation

    @property
    def order(self) -> int:
        return self._order

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def active(self) -> bool:
        """True while the entry is registered."""
        return self._state is HandleState.REGISTERED

    def _sort_key(self) -> Tuple[int, int]:
        return (self._order, self._sequence)

    def __repr__(self) -> str:
        return (
            f"RegistrationHandle(capability={self._capability.name!r}, "
            f"implementation={type(self._implementation).__name__}, "
            f"order={self._order}, state={self._state.value})"
        )


# =============================================================================
# Resolution
# =============================================================================

class Resolution(Sequence[Any]):
    """
    Immutable snapshot of the implementations registered for a capability.

    A Resolution is lazy (items are produced on iteration), finite and
    restartable: every iteration walks the same snapshot from the start,
    regardless of later registry mutations.
    """

    __slots__ = ('_capability', '_handles')

    def __init__(self, capability: Capability, handles: Tuple[RegistrationHandle, ...]):
        self._capability = capability
        self._handles = handles

    @property
    def capability(self) -> Capability:
        return self._capability

    @property
    def handles(self) -> Tuple[RegistrationHandle, ...]:
        return self._handles

    def __iter__(self) -> Iterator[Any]:
        return (handle.implementation for handle in self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> List[Any]: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [handle.implementation for handle in self._handles[index]]
        return self._handles[index].implementation

    def __bool__(self) -> bool:
        return bool(self._handles)

    def __repr__(self) -> str:
        names = ", ".join(type(h.implementation).__name__ for h in self._handles)
        return f"Resolution({self._capability.name!r}, [{names}])"


# =============================================================================
# Registry
# =============================================================================

class Registry:
    """
    Maps capabilities to ordered implementation entries.

    Adding a new variant of a behavior (a new payment method, a new worker)
    is a register() call; code that resolves or dispatches the capability
    never changes.

    Example:
        registry = Registry()
        cash = registry.register(Payment, CashPayment())
        registry.register(Payment, VisaPayment())

        list(registry.resolve(Payment))   # [CashPayment, VisaPayment]
        registry.deregister(cash)
        list(registry.resolve(Payment))   # [VisaPayment]
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._entries: Dict[Capability, Tuple[RegistrationHandle, ...]] = {}
        self._sequence = itertools.count()

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def register(
        self,
        capability: Capability,
        implementation: Any,
        order: int = 0,
    ) -> RegistrationHandle:
        """
        Register an implementation under a capability.

        Args:
            capability: The capability being provided
            implementation: Object satisfying the capability
            order: Sort key; lower resolves first, ties in registration order

        Returns:
            RegistrationHandle for later deregistration

        Raises:
            TypeMismatchError: If the implementation does not satisfy the
                capability. The registry is unchanged.
        """
        validate_capability(capability)
        if not isinstance(order, int) or isinstance(order, bool):
            raise InvalidCapabilityError(f"order must be int, got {type(order).__name__}")

        capability.check(implementation)

        with self._lock:
            handle = RegistrationHandle(
                self, capability, implementation, order, next(self._sequence)
            )
            current = self._entries.get(capability, ())
            self._entries[capability] = tuple(
                sorted(current + (handle,), key=RegistrationHandle._sort_key)
            )

        logger.debug("Registered %r", handle)
        return handle

    def deregister(self, handle: RegistrationHandle) -> None:
        """
        Remove a registration entry.

        Idempotent: deregistering an already deregistered handle is a no-op.

        Raises:
            ForeignHandleError: If the handle was issued by another registry.
        """
        if not isinstance(handle, RegistrationHandle) or handle._registry is not self:
            raise ForeignHandleError(handle)

        with self._lock:
            if not handle.active:
                return
            self._remove(handle)

        logger.debug("Deregistered %r", handle)

    def replace(
        self,
        capability: Capability,
        old: Any,
        new: Any,
    ) -> RegistrationHandle:
        """
        Atomically swap one implementation for another.

        The new implementation takes the old entry's position. Concurrent
        resolutions observe either the complete old set or the complete new
        set.

        Args:
            capability: The capability both implementations provide
            old: RegistrationHandle or implementation currently registered
            new: Replacement implementation

        Returns:
            RegistrationHandle for the new entry

        Raises:
            TypeMismatchError: If ``new`` does not satisfy the capability.
            RegistrationNotFoundError: If ``old`` is not registered under
                the capability.
            ForeignHandleError: If ``old`` is a handle issued by another
                registry.
        """
        validate_capability(capability)
        if isinstance(old, RegistrationHandle) and old._registry is not self:
            raise ForeignHandleError(old)
        capability.check(new)

        with self._lock:
            current = self._entries.get(capability, ())
            target = self._find(current, old)
            if target is None:
                raise RegistrationNotFoundError(capability.name, old)

            handle = RegistrationHandle(
                self, capability, new, target.order, target.sequence
            )
            self._entries[capability] = tuple(
                handle if h is target else h for h in current
            )
            target._state = HandleState.DEREGISTERED

        logger.debug("Replaced %r with %r", target, handle)
        return handle

    def clear(self, capability: Optional[Capability] = None) -> None:
        """Deregister every entry, or every entry of one capability."""
        with self._lock:
            if capability is None:
                removed = [h for handles in self._entries.values() for h in handles]
                self._entries = {}
            else:
                removed = list(self._entries.pop(capability, ()))
            for handle in removed:
                handle._state = HandleState.DEREGISTERED

        logger.debug("Cleared %d registration(s)", len(removed))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def resolve(self, capability: Capability) -> Resolution:
        """
        Return a snapshot of the implementations registered for a capability.

        An unregistered capability resolves to an empty Resolution.
        """
        validate_capability(capability)
        return Resolution(capability, self._entries.get(capability, ()))

    def entries(self, capability: Capability) -> Tuple[RegistrationHandle, ...]:
        """Return the live handles for a capability in resolution order."""
        return self._entries.get(capability, ())

    def capabilities(self) -> List[Capability]:
        """Capabilities with at least one entry, in first-registration order."""
        snapshot = dict(self._entries)
        return sorted(
            (c for c, handles in snapshot.items() if handles),
            key=lambda c: min(h.sequence for h in snapshot[c]),
        )

    def __contains__(self, capability: object) -> bool:
        return bool(self._entries.get(capability, ()))  # type: ignore[arg-type]

    def __len__(self) -> int:
        return sum(len(handles) for handles in list(self._entries.values()))

    def __repr__(self) -> str:
        return f"Registry(capabilities={len(self._entries)}, entries={len(self)})"

    # -------------------------------------------------------------------------
    # Internal Helper Methods
    # -------------------------------------------------------------------------

    def _remove(self, handle: RegistrationHandle) -> None:
        # Caller holds the lock
        remaining = tuple(h for h in self._entries.get(handle.capability, ()) if h is not handle)
        if remaining:
            self._entries[handle.capability] = remaining
        else:
            self._entries.pop(handle.capability, None)
        handle._state = HandleState.DEREGISTERED

    @staticmethod
    def _find(
        handles: Tuple[RegistrationHandle, ...],
        old: Any,
    ) -> Optional[RegistrationHandle]:
        if isinstance(old, RegistrationHandle):
            return old if old in handles else None
        for handle in handles:
            if handle.implementation is old:
                return handle
        return None
