"""
errors.py

Plugboard error taxonomy.

Every error carries a stable error code so callers can branch on the
failure kind without string matching:

- P001 InvalidCapabilityError          malformed capability definition
- P002 TypeMismatchError               implementation does not satisfy a capability
- P003 NoImplementationAvailableError  nothing registered for a capability
- P004 CapabilityNotSupportedError     holder or object lacks a capability
- P005 RegistrationNotFoundError       replace() target is not registered
- P006 ForeignHandleError              handle belongs to another registry
- P007 ContractViolationError          result breaks the capability contract
- P008 UnsupportedOperationError       declared "cannot perform" failure
- P009 CapabilityImmutabilityError     mutation of an immutable capability

No error is fatal: each one is raised to the caller of the failing
operation and leaves the registry unchanged.
"""

from typing import Iterable, Optional


def _describe(implementation: object) -> str:
    """Name an implementation (or implementation class) for messages."""
    if isinstance(implementation, type):
        return implementation.__name__
    return type(implementation).__name__


class PlugboardError(Exception):
    """
    Base class for all Plugboard errors.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str = "P000",
    ):
        self.message = message
        self.error_code = error_code
        super().__init__(self.format())

    def format(self) -> str:
        """Format as human-readable error message."""
        return f"[{self.error_code}] {self.message}"


class InvalidCapabilityError(PlugboardError):
    """Raised when a Capability or Parameter cannot be constructed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            message=f"Invalid capability: {reason}",
            error_code="P001",
        )


class TypeMismatchError(PlugboardError):
    """Raised when an implementation does not structurally satisfy a capability."""

    def __init__(self, capability: str, implementation: object, reason: str):
        self.capability = capability
        self.implementation = implementation
        self.reason = reason
        super().__init__(
            message=(
                f"{_describe(implementation)} does not satisfy "
                f"capability '{capability}': {reason}"
            ),
            error_code="P002",
        )


class NoImplementationAvailableError(PlugboardError):
    """Raised when a capability resolves to no implementations at invocation time."""

    def __init__(self, capability: str):
        self.capability = capability
        super().__init__(
            message=f"No implementation registered for capability '{capability}'",
            error_code="P003",
        )


class CapabilityNotSupportedError(PlugboardError):
    """Raised when a holder or object is asked for a capability it does not declare."""

    def __init__(self, owner: str, missing: Iterable[str]):
        self.owner = owner
        self.missing = tuple(missing)
        names = ", ".join(f"'{m}'" for m in self.missing)
        super().__init__(
            message=f"{owner} does not support capability {names}",
            error_code="P004",
        )


class RegistrationNotFoundError(PlugboardError):
    """Raised when replace() targets an entry that is not currently registered."""

    def __init__(self, capability: str, target: object):
        self.capability = capability
        self.target = target
        super().__init__(
            message=f"{target!r} is not registered under capability '{capability}'",
            error_code="P005",
        )


class ForeignHandleError(PlugboardError):
    """Raised when a RegistrationHandle is passed to a registry that did not issue it."""

    def __init__(self, handle: object):
        self.handle = handle
        super().__init__(
            message=f"{handle!r} was issued by a different registry",
            error_code="P006",
        )


class ContractViolationError(PlugboardError):
    """Raised when an implementation's result breaks the capability's declared contract."""

    def __init__(self, capability: str, implementation: object, reason: str):
        self.capability = capability
        self.implementation = implementation
        self.reason = reason
        super().__init__(
            message=(
                f"{_describe(implementation)} broke the contract of "
                f"capability '{capability}': {reason}"
            ),
            error_code="P007",
        )


class UnsupportedOperationError(PlugboardError):
    """
    Declared failure kind for an implementer that cannot perform an action
    for a particular input.

    This is NOT a substitute for omitting a capability: an object that can
    never perform an action should not implement the capability at all.
    """

    def __init__(self, operation: str, reason: Optional[str] = None):
        self.operation = operation
        self.reason = reason
        message = f"Operation '{operation}' is not supported"
        if reason:
            message += f": {reason}"
        super().__init__(message=message, error_code="P008")


class CapabilityImmutabilityError(PlugboardError):
    """Raised when attempting to mutate a Capability or Parameter."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            message=f"Cannot {operation}: Capability is immutable after creation",
            error_code="P009",
        )
