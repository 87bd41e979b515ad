"""
shapes.py

Rectangle and Square as independent Polygon implementations.

A Square is not a Rectangle subclass here: both implement the Polygon
capability on their own, so neither can break the other's contract.
"""

from plugboard import Capability, Dispatcher, implements

Polygon = Capability(
    "Polygon",
    operation="area",
    returns=float,
    postcondition=lambda area: area >= 0,
)


@implements(Polygon)
class Rectangle:
    def __init__(self, width: float = 0.0, height: float = 0.0):
        self.width = float(width)
        self.height = float(height)

    def area(self) -> float:
        return self.width * self.height


@implements(Polygon)
class Square:
    def __init__(self, side: float = 0.0):
        self.side = float(side)

    def area(self) -> float:
        return self.side ** 2


def area_of(dispatcher: Dispatcher, polygon) -> float:
    """Area of any Polygon, checked against the capability contract."""
    result = dispatcher.call(polygon, Polygon)
    return Polygon.verify_result(polygon, result)


def total_area(dispatcher: Dispatcher) -> float:
    """Sum of the areas of every registered Polygon."""
    return sum(dispatcher.invoke_all(Polygon))
