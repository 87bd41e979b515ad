"""
holder.py

Plugboard CompositeHolder — one logical entity built from independent capabilities.

Instead of one wide contract that forces every implementer to provide every
method, a holder aggregates exactly the capabilities its parts implement.
A missing capability is a fact visible before any invocation:

    robot = CompositeHolder("robot", [RobotArm()])
    robot.supports(Feedable)    # False
    robot.invoke(Feedable)      # CapabilityNotSupportedError, nothing runs
"""

import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Union

from plugboard.capability import Capability, declared_capabilities, validate_capability
from plugboard.errors import CapabilityNotSupportedError, InvalidCapabilityError
from plugboard.registry import Registry, RegistrationHandle

logger = logging.getLogger(__name__)


class CompositeHolder:
    """
    A named set of capability implementations bound to one entity.

    Args:
        name: Name of the logical entity (used in error messages)
        provides: Mapping of capability to implementation, or an iterable
            of implementations bound to every capability they declare
            with @implements
        requires: Capabilities the holder must provide; construction fails
            with CapabilityNotSupportedError otherwise

    Raises:
        TypeMismatchError: If an implementation does not satisfy the
            capability it is bound to.
    """

    __slots__ = ('_name', '_bindings')

    def __init__(
        self,
        name: str,
        provides: Union[Mapping[Capability, Any], Iterable[Any]],
        requires: Iterable[Capability] = (),
    ):
        if not isinstance(name, str) or not name.strip():
            raise InvalidCapabilityError(f"holder name must be a non-empty string, got {name!r}")

        bindings: Dict[Capability, Any] = {}
        if isinstance(provides, Mapping):
            pairs = list(provides.items())
        else:
            pairs = []
            for part in provides:
                declared = declared_capabilities(part)
                if not declared:
                    raise InvalidCapabilityError(
                        f"{type(part).__name__} declares no capabilities; "
                        "bind it explicitly with a mapping"
                    )
                pairs.extend((c, part) for c in sorted(declared, key=lambda c: c.name))

        for capability, implementation in pairs:
            if not isinstance(capability, Capability):
                raise InvalidCapabilityError(
                    f"expected Capability, got {type(capability).__name__}"
                )
            if capability in bindings:
                raise InvalidCapabilityError(
                    f"capability '{capability.name}' bound twice in holder '{name}'"
                )
            capability.check(implementation)
            bindings[capability] = implementation

        self._name = name
        self._bindings = bindings
        self.require(*requires)

    @property
    def name(self) -> str:
        return self._name

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        return frozenset(self._bindings)

    def supports(self, capability: Capability) -> bool:
        """Check whether this holder provides a capability."""
        return capability in self._bindings

    def __contains__(self, capability: object) -> bool:
        return capability in self._bindings

    def require(self, *capabilities: Capability) -> "CompositeHolder":
        """
        Assert that every given capability is provided.

        Returns:
            The holder itself, for chaining

        Raises:
            InvalidCapabilityError: If an argument is not a Capability.
            CapabilityNotSupportedError: Naming every missing capability.
        """
        for capability in capabilities:
            validate_capability(capability)
        missing = [c.name for c in capabilities if c not in self._bindings]
        if missing:
            raise CapabilityNotSupportedError(f"holder '{self._name}'", missing)
        return self

    def get(self, capability: Capability) -> Any:
        """Return the implementation bound to a capability."""
        self.require(capability)
        return self._bindings[capability]

    def invoke(self, capability: Capability, *args: Any, **kwargs: Any) -> Any:
        """
        Invoke a capability provided by this holder.

        Raises:
            CapabilityNotSupportedError: Before anything executes, if the
                capability is not provided.
        """
        implementation = self.get(capability)
        return getattr(implementation, capability.operation)(*args, **kwargs)

    def register_into(self, registry: Registry, order: int = 0) -> List[RegistrationHandle]:
        """Register every binding into a registry, one handle per capability."""
        handles = [
            registry.register(capability, implementation, order)
            for capability, implementation in self._bindings.items()
        ]
        logger.debug("Holder %r registered %d capabilities", self._name, len(handles))
        return handles

    def __repr__(self) -> str:
        names = ", ".join(sorted(c.name for c in self._bindings))
        return f"CompositeHolder({self._name!r}, capabilities=[{names}])"


def require(implementation: Any, *capabilities: Capability) -> Any:
    """
    Assert that a plain object satisfies every given capability.

    Returns:
        The object itself

    Raises:
        CapabilityNotSupportedError: Naming every capability the object
            does not satisfy.
        InvalidCapabilityError: If an argument is not a Capability.
    """
    if isinstance(implementation, CompositeHolder):
        return implementation.require(*capabilities)
    for capability in capabilities:
        validate_capability(capability)
    missing = [c.name for c in capabilities if not c.is_satisfied_by(implementation)]
    if missing:
        raise CapabilityNotSupportedError(type(implementation).__name__, missing)
    return implementation
