"""
workers.py

Workers built from narrow capabilities, managed through an abstraction.

- Human implements Workable and Feedable; Robot implements Workable only,
  so "robot eats" is rejected before anything runs
- Employer depends on Workable, never on Employee, Human or Robot
"""

from typing import Any, Dict, Iterable, List

from plugboard import (
    Capability,
    CompositeHolder,
    Dispatcher,
    Registry,
    implements,
)

Workable = Capability("Workable", operation="work", returns=str)
Feedable = Capability("Feedable", operation="eat", returns=str)


@implements(Workable, Feedable)
class Human:
    def work(self) -> str:
        return "working"

    def eat(self) -> str:
        return "eating"


@implements(Workable)
class Robot:
    def work(self) -> str:
        return "working"


@implements(Workable)
class Employee:
    def __init__(self, name: str):
        self.name = name

    def work(self) -> str:
        return f"{self.name} working..."


def make_human(name: str = "human") -> CompositeHolder:
    return CompositeHolder(name, [Human()])


def make_robot(name: str = "robot") -> CompositeHolder:
    return CompositeHolder(name, [Robot()], requires=[Workable])


def lunch_break(holders: Iterable[CompositeHolder]) -> Dict[str, Any]:
    """Feed every holder that can eat; the rest are skipped by capability check."""
    return {h.name: h.invoke(Feedable) for h in holders if h.supports(Feedable)}


class Employer:
    """Manages whatever Workable implementations are registered."""

    def __init__(self, registry: Registry):
        self.registry = registry
        self.dispatcher = Dispatcher(registry)

    def hire(self, workable: Any) -> None:
        self.registry.register(Workable, workable)

    def manage(self) -> List[str]:
        return self.dispatcher.invoke_all(Workable)
