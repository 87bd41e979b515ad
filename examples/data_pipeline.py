"""
data_pipeline.py

A DataHandler split into load, parse and store responsibilities.

Each responsibility is its own capability with its own implementation;
DataHandler only coordinates them. Changing the storage backend or the
wire format touches one implementation and nothing else.
"""

import json
from typing import Any, Dict, List

from plugboard import Capability, CompositeHolder, implements

Loadable = Capability("Loadable", operation="load_data", returns=bytes)
Parseable = Capability("Parseable", operation="parse", parameters=["data"])
Storable = Capability("Storable", operation="save", parameters=["model"])


@implements(Loadable)
class StaticSource:
    """Serves a fixed payload."""

    def __init__(self, payload: bytes):
        self.payload = payload

    def load_data(self) -> bytes:
        return self.payload


@implements(Parseable)
class JsonParser:
    def parse(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


@implements(Storable)
class MemoryStorage:
    def __init__(self):
        self.saved: List[Any] = []

    def save(self, model: Any) -> None:
        self.saved.append(model)


class DataHandler:
    """Loads, parses and stores through injected capabilities."""

    def __init__(self, parts: CompositeHolder):
        self.parts = parts.require(Loadable, Parseable, Storable)

    def handle(self) -> Any:
        data = self.parts.invoke(Loadable)
        model = self.parts.invoke(Parseable, data)
        self.parts.invoke(Storable, model)
        return model


def build_handler(payload: bytes, storage: MemoryStorage) -> DataHandler:
    parts: Dict[Capability, Any] = {
        Loadable: StaticSource(payload),
        Parseable: JsonParser(),
        Storable: storage,
    }
    return DataHandler(CompositeHolder("data_handler", parts))
