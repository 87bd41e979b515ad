"""
dispatcher.py

Plugboard Dispatcher — invokes a capability without knowing who implements it.

The Dispatcher:
- Resolves a capability through a Registry
- Selects one implementation (first registered by default)
- Invokes the capability's operation and returns the result unchanged

The Dispatcher does NOT:
- Inspect an implementation's concrete type
- Swallow failures raised by an implementation
- Fall back to a default when nothing is registered

Any two implementations of a capability are interchangeable from the
Dispatcher's point of view; swapping one for another changes only the
returned value.
"""

import logging
from typing import Any, List, Optional

from plugboard.capability import Capability, validate_capability
from plugboard.config import DispatchOptions, Selector
from plugboard.errors import (
    CapabilityNotSupportedError,
    NoImplementationAvailableError,
    TypeMismatchError,
)
from plugboard.registry import Registry, Resolution

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Capability-typed invocation over a Registry.

    Example:
        dispatcher = Dispatcher(registry)
        receipt = dispatcher.invoke(Payment, 10)

        # A new payment method is a registration, not a Dispatcher change
        registry.register(Payment, MasterCardPayment())
    """

    __slots__ = ('_registry', '_options')

    def __init__(
        self,
        registry: Registry,
        options: Optional[DispatchOptions] = None,
    ):
        if not isinstance(registry, Registry):
            raise TypeError(f"registry must be Registry, got {type(registry).__name__}")
        self._registry = registry
        self._options = options or DispatchOptions()

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def options(self) -> DispatchOptions:
        return self._options

    def invoke(self, capability: Capability, *args: Any, **kwargs: Any) -> Any:
        """
        Invoke a capability on the implementation picked by the configured selector.

        Args:
            capability: Capability to invoke
            *args, **kwargs: Passed to the operation unchanged

        Returns:
            The implementation's result, unchanged

        Raises:
            NoImplementationAvailableError: If nothing is registered.
            TypeMismatchError: If the selector returns an object that is not
                one of the resolved candidates.
            ContractViolationError: If contracts are enforced and the result
                breaks them.
        """
        return self.invoke_with(self._options.selector, capability, *args, **kwargs)

    def invoke_with(
        self,
        selector: Selector,
        capability: Capability,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """
        Like invoke(), with a selector overriding the configured one for this call.

        Every keyword argument belongs to the operation, so a capability may
        declare any parameter name, ``selector`` included.
        """
        if not callable(selector):
            raise TypeError(f"selector must be callable, got {selector!r}")
        candidates = self._resolve(capability)

        chosen = selector(candidates)
        for index, candidate in enumerate(candidates):
            if candidate is chosen:
                break
        else:
            raise TypeMismatchError(
                capability.name, chosen, "selector returned an unregistered object"
            )

        logger.debug(
            "Dispatching %s to candidate %d of %d", capability.name, index, len(candidates)
        )
        return self._call(capability, chosen, args, kwargs)

    def invoke_all(self, capability: Capability, *args: Any, **kwargs: Any) -> List[Any]:
        """
        Invoke a capability on every registered implementation in order.

        The first failure propagates; implementations after it are not
        invoked.

        Raises:
            NoImplementationAvailableError: If nothing is registered.
        """
        candidates = self._resolve(capability)
        return [self._call(capability, c, args, kwargs) for c in candidates]

    def call(
        self,
        implementation: Any,
        capability: Capability,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """
        Invoke a capability directly on a given object.

        Raises:
            InvalidCapabilityError: If ``capability`` is not a Capability.
            CapabilityNotSupportedError: If the object does not satisfy the
                capability. Nothing is executed.
        """
        validate_capability(capability)
        if not capability.is_satisfied_by(implementation):
            raise CapabilityNotSupportedError(
                type(implementation).__name__, [capability.name]
            )
        return self._call(capability, implementation, args, kwargs)

    def _resolve(self, capability: Capability) -> Resolution:
        candidates = self._registry.resolve(capability)
        if not candidates:
            logger.debug("No implementation registered for %s", capability.name)
            raise NoImplementationAvailableError(capability.name)
        return candidates

    def _call(self, capability: Capability, implementation: Any, args, kwargs) -> Any:
        result = capability.bind(implementation)(*args, **kwargs)
        if self._options.enforce_contracts:
            capability.verify_result(implementation, result)
        return result

    def __repr__(self) -> str:
        return f"Dispatcher({self._registry!r})"
