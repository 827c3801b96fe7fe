from __future__ import annotations

from typing import Any


class InfraMapError(ValueError):
    """Base class for dataset and taxonomy failures."""


class UnknownPropertyId(InfraMapError):
    def __init__(self, dimension: str, property_id: object) -> None:
        self.dimension = dimension
        self.property_id = property_id
        super().__init__(f"unknown {dimension} id: {property_id!r}")


class MalformedDataset(InfraMapError):
    def __init__(self, message: str, record: Any = None) -> None:
        self.record = record
        super().__init__(message)
