"""
capability.py

Plugboard Capability — a named contract for one orthogonal unit of behavior.

A Capability describes:
- The operation name an implementation must expose
- The parameters that operation accepts
- The result type it returns (optional)
- The failure kinds it may raise
- An optional postcondition every implementation must honor

Design Invariants:
- Immutable after creation
- One operation per capability
- No implementation logic
- Satisfaction is structural; a class may additionally declare the
  capabilities it implements with @implements
"""

import inspect
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from plugboard.errors import (
    CapabilityImmutabilityError,
    ContractViolationError,
    InvalidCapabilityError,
    TypeMismatchError,
)

# Attribute set on classes by @implements
_DECLARED_ATTR = "__capabilities__"

# Placeholder passed to inspect.Signature.bind
_ARG = object()


# =============================================================================
# Helper Functions
# =============================================================================

def _validate_identifier(value: Any, field_name: str) -> str:
    """Validate that a value is a valid Python identifier."""
    if not isinstance(value, str):
        raise InvalidCapabilityError(
            f"{field_name} must be a string, got {type(value).__name__}"
        )
    if not value.isidentifier():
        raise InvalidCapabilityError(
            f"{field_name} must be a valid identifier, got {value!r}"
        )
    return value


def _validate_name(value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidCapabilityError(
            f"name must be a string, got {type(value).__name__}"
        )
    if not value.strip():
        raise InvalidCapabilityError("name cannot be empty or whitespace-only")
    return value


def _type_name(value: Any) -> str:
    if isinstance(value, tuple):
        return " | ".join(t.__name__ for t in value)
    return value.__name__


# =============================================================================
# Parameter
# =============================================================================

class Parameter:
    """
    One parameter of a capability's operation.

    Attributes:
        name: Parameter name (a Python identifier)
        required: Whether every caller supplies this parameter
    """

    __slots__ = ('_name', '_required', '_frozen')

    def __init__(self, name: str, *, required: bool = True):
        name = _validate_identifier(name, "parameter name")
        if not isinstance(required, bool):
            raise InvalidCapabilityError(
                f"parameter '{name}': required must be bool, "
                f"got {type(required).__name__}"
            )

        object.__setattr__(self, '_name', name)
        object.__setattr__(self, '_required', required)
        object.__setattr__(self, '_frozen', True)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, '_frozen', False):
            raise CapabilityImmutabilityError(f"set attribute '{name}'")
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, '_frozen', False):
            raise CapabilityImmutabilityError(f"delete attribute '{name}'")
        object.__delattr__(self, name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def required(self) -> bool:
        return self._required

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Parameter):
            return NotImplemented
        return self._name == other._name and self._required == other._required

    def __hash__(self) -> int:
        return hash((self._name, self._required))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary."""
        return {"name": self._name, "required": self._required}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Parameter":
        """Construct from a dictionary."""
        return cls(data["name"], required=data.get("required", True))

    def __repr__(self) -> str:
        req = "required" if self._required else "optional"
        return f"Parameter(name={self._name!r}, {req})"

    def __str__(self) -> str:
        return self._name if self._required else f"{self._name}?"


# =============================================================================
# Capability
# =============================================================================

class Capability:
    """
    A single named operation contract.

    Implementations satisfy a Capability by exposing a callable attribute
    named ``operation`` that accepts the declared parameters. Two
    implementations of the same Capability are interchangeable: callers
    depend on the Capability, never on a concrete class.

    Example:
        Payment = Capability(
            "Payment",
            operation="make_payment",
            parameters=["amount"],
            returns=PaymentReceipt,
        )

        class Cash:
            def make_payment(self, amount):
                return PaymentReceipt(method="cash", amount=amount)

        Payment.bind(Cash())(10)

    Attributes:
        name: Capability identifier
        operation: Name of the method implementations expose
        parameters: Ordered parameter definitions
        returns: Expected result type (or tuple of types), None if unchecked
        failures: Exception classes the operation may raise
        postcondition: Predicate over the result every implementation honors
        description: Human-readable description
    """

    __slots__ = (
        '_name',
        '_operation',
        '_parameters',
        '_returns',
        '_failures',
        '_postcondition',
        '_description',
        '_frozen',
    )

    def __init__(
        self,
        name: str,
        *,
        operation: str,
        parameters: Optional[List[Parameter | str | Dict[str, Any]]] = None,
        returns: Optional[type | Tuple[type, ...]] = None,
        failures: Optional[List[type]] = None,
        postcondition: Optional[Callable[[Any], bool]] = None,
        description: Optional[str] = None,
    ):
        name = _validate_name(name)
        operation = _validate_identifier(operation, "operation")

        # Parse parameters
        parsed: List[Parameter] = []
        seen = set()
        for i, param in enumerate(parameters or []):
            if isinstance(param, str):
                param = Parameter(param)
            elif isinstance(param, dict):
                param = Parameter.from_dict(param)
            elif not isinstance(param, Parameter):
                raise InvalidCapabilityError(
                    f"parameter[{i}] must be Parameter, str or dict, "
                    f"got {type(param).__name__}"
                )
            if param.name in seen:
                raise InvalidCapabilityError(f"duplicate parameter '{param.name}'")
            if param.required and parsed and not parsed[-1].required:
                raise InvalidCapabilityError(
                    f"required parameter '{param.name}' follows an optional one"
                )
            seen.add(param.name)
            parsed.append(param)

        # Validate return type
        if returns is not None:
            candidates = returns if isinstance(returns, tuple) else (returns,)
            if not candidates or not all(isinstance(t, type) for t in candidates):
                raise InvalidCapabilityError(
                    f"returns must be a type or tuple of types, got {returns!r}"
                )

        # Validate failure kinds
        parsed_failures: List[type] = []
        for failure in failures or []:
            if not (isinstance(failure, type) and issubclass(failure, Exception)):
                raise InvalidCapabilityError(
                    f"failures must be Exception subclasses, got {failure!r}"
                )
            parsed_failures.append(failure)

        if postcondition is not None and not callable(postcondition):
            raise InvalidCapabilityError("postcondition must be callable")

        if description is not None and not isinstance(description, str):
            raise InvalidCapabilityError(
                f"description must be a string, got {type(description).__name__}"
            )

        object.__setattr__(self, '_name', name)
        object.__setattr__(self, '_operation', operation)
        object.__setattr__(self, '_parameters', tuple(parsed))
        object.__setattr__(self, '_returns', returns)
        object.__setattr__(self, '_failures', tuple(parsed_failures))
        object.__setattr__(self, '_postcondition', postcondition)
        object.__setattr__(self, '_description', description)
        object.__setattr__(self, '_frozen', True)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, '_frozen', False):
            raise CapabilityImmutabilityError(f"set attribute '{name}'")
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, '_frozen', False):
            raise CapabilityImmutabilityError(f"delete attribute '{name}'")
        object.__delattr__(self, name)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        """Capability identifier."""
        return self._name

    @property
    def operation(self) -> str:
        """Name of the method implementations expose."""
        return self._operation

    @property
    def parameters(self) -> Tuple[Parameter, ...]:
        return self._parameters

    @property
    def returns(self) -> Optional[type | Tuple[type, ...]]:
        return self._returns

    @property
    def failures(self) -> Tuple[type, ...]:
        return self._failures

    @property
    def postcondition(self) -> Optional[Callable[[Any], bool]]:
        return self._postcondition

    @property
    def description(self) -> Optional[str]:
        return self._description

    @property
    def signature(self) -> str:
        """Operation signature, e.g. ``make_payment(amount) -> Receipt``."""
        params = ", ".join(str(p) for p in self._parameters)
        result = f"{self._operation}({params})"
        if self._returns is not None:
            result += f" -> {_type_name(self._returns)}"
        return result

    # -------------------------------------------------------------------------
    # Structural Checks
    # -------------------------------------------------------------------------

    def check(self, implementation: Any) -> None:
        """
        Verify that an implementation satisfies this capability.

        Raises:
            TypeMismatchError: If the implementation declares a capability
                set that excludes this one, lacks the operation, exposes a
                non-callable attribute under its name, or has a signature
                that cannot accept the declared parameters.
        """
        declared = declared_capabilities(implementation)
        if declared and self not in declared:
            raise TypeMismatchError(
                self._name,
                implementation,
                "declared capabilities are "
                + ", ".join(sorted(c.name for c in declared)),
            )

        operation = getattr(implementation, self._operation, None)
        if operation is None:
            raise TypeMismatchError(
                self._name, implementation, f"missing operation '{self._operation}'"
            )
        if not callable(operation):
            raise TypeMismatchError(
                self._name, implementation, f"'{self._operation}' is not callable"
            )

        try:
            signature = inspect.signature(operation)
        except (TypeError, ValueError):
            # Builtins without introspectable signatures are accepted as-is
            return

        required = [p for p in self._parameters if p.required]
        for arity in {len(required), len(self._parameters)}:
            try:
                signature.bind(*([_ARG] * arity))
            except TypeError:
                raise TypeMismatchError(
                    self._name,
                    implementation,
                    f"'{self._operation}{signature}' cannot be called as "
                    f"{self.signature}",
                )

    def is_satisfied_by(self, implementation: Any) -> bool:
        """Check whether an implementation satisfies this capability."""
        try:
            self.check(implementation)
        except TypeMismatchError:
            return False
        return True

    def bind(self, implementation: Any) -> Callable[..., Any]:
        """Return the implementation's operation after checking it."""
        self.check(implementation)
        return getattr(implementation, self._operation)

    def verify_result(self, implementation: Any, result: Any) -> Any:
        """
        Check a result against the declared return type and postcondition.

        Returns the result unchanged.

        Raises:
            ContractViolationError: If either check fails.
        """
        if self._returns is not None and not isinstance(result, self._returns):
            raise ContractViolationError(
                self._name,
                implementation,
                f"expected {_type_name(self._returns)}, "
                f"got {type(result).__name__}",
            )
        if self._postcondition is not None and not self._postcondition(result):
            raise ContractViolationError(
                self._name, implementation, f"postcondition failed for {result!r}"
            )
        return result

    def declares_failure(self, error: BaseException) -> bool:
        """Check whether an exception is one of the declared failure kinds."""
        return isinstance(error, self._failures)

    # -------------------------------------------------------------------------
    # Comparison Methods
    # -------------------------------------------------------------------------

    def _key(self) -> Tuple[Any, ...]:
        # Identity is the signature; failures and postcondition are contract detail
        return (self._name, self._operation, self._parameters, self._returns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Capability):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Describe this capability as a dictionary."""
        result: Dict[str, Any] = {
            "failures": [f.__name__ for f in self._failures],
            "name": self._name,
            "operation": self._operation,
            "parameters": [p.to_dict() for p in self._parameters],
        }
        if self._returns is not None:
            result["returns"] = _type_name(self._returns)
        if self._description is not None:
            result["description"] = self._description
        return result

    def __repr__(self) -> str:
        return f"Capability(name={self._name!r}, signature={self.signature!r})"

    def __str__(self) -> str:
        return self._name


# =============================================================================
# Declarations
# =============================================================================

def implements(*capabilities: Capability) -> Callable[[type], type]:
    """
    Class decorator declaring the capabilities a class implements.

    Declarations are merged with those of base classes. Each operation is
    checked for presence at decoration time, so a class cannot declare a
    capability it does not provide.

    Example:
        @implements(Workable)
        class Robot:
            def work(self):
                return "working"
    """
    if not capabilities:
        raise InvalidCapabilityError("implements() needs at least one capability")
    for capability in capabilities:
        if not isinstance(capability, Capability):
            raise InvalidCapabilityError(
                f"implements() expects Capability, got {type(capability).__name__}"
            )

    def decorate(cls: type) -> type:
        for capability in capabilities:
            if not callable(getattr(cls, capability.operation, None)):
                raise TypeMismatchError(
                    capability.name,
                    cls,
                    f"missing operation '{capability.operation}'",
                )
        inherited: FrozenSet[Capability] = frozenset()
        for base in cls.__mro__[1:]:
            inherited |= base.__dict__.get(_DECLARED_ATTR, frozenset())
        setattr(cls, _DECLARED_ATTR, inherited | frozenset(capabilities))
        return cls

    return decorate


def declared_capabilities(implementation: Any) -> FrozenSet[Capability]:
    """Return the capabilities declared by an object's class (empty if none)."""
    cls = implementation if isinstance(implementation, type) else type(implementation)
    return getattr(cls, _DECLARED_ATTR, frozenset())


def validate_capability(capability: Any) -> Capability:
    """Raise InvalidCapabilityError unless the argument is a Capability."""
    if not isinstance(capability, Capability):
        raise InvalidCapabilityError(
            f"expected Capability, got {type(capability).__name__}"
        )
    return capability
