"""
config.py

Dispatcher configuration and the built-in selection rules.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Sequence

# Picks one implementation out of a non-empty resolution
Selector = Callable[[Sequence[Any]], Any]


def first_registered(candidates: Sequence[Any]) -> Any:
    """Select the first implementation in resolution order."""
    return candidates[0]


def last_registered(candidates: Sequence[Any]) -> Any:
    """Select the most recently ordered implementation."""
    return candidates[-1]


@dataclass(frozen=True)
class DispatchOptions:
    """
    Immutable dispatcher configuration.

    Attributes:
        selector: Rule picking one implementation when several are registered
        enforce_contracts: Verify results against the capability's declared
            return type and postcondition
    """
    selector: Selector = first_registered
    enforce_contracts: bool = False

    def __post_init__(self) -> None:
        if not callable(self.selector):
            raise TypeError(f"selector must be callable, got {self.selector!r}")
        if not isinstance(self.enforce_contracts, bool):
            raise TypeError(
                f"enforce_contracts must be bool, got {type(self.enforce_contracts).__name__}"
            )

    def with_selector(self, selector: Selector) -> "DispatchOptions":
        """Return a copy using a different selector."""
        return replace(self, selector=selector)

    def with_contracts(self, enforce: bool = True) -> "DispatchOptions":
        """Return a copy with contract enforcement switched on or off."""
        return replace(self, enforce_contracts=enforce)
