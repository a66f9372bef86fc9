"""
Custom exceptions for the relation graph engine.

This module defines the error taxonomy shared by the graph builder,
the filter pipeline and the record loader.
"""

from dataclasses import dataclass


class RelGraphException(Exception):
    """Base exception for all relation graph errors."""
    pass


class EmptyInputError(RelGraphException):
    """Raised when there are no records to build a graph from."""
    def __init__(self, message: str = None):
        super().__init__(message or "No relation records to build a graph from")


class InvalidFilterParameters(RelGraphException, ValueError):
    """Raised when filter parameters are outside their documented ranges."""
    def __init__(self, field_name: str, value, message: str = None):
        self.field_name = field_name
        self.value = value
        super().__init__(message or f"Invalid value for filter parameter '{field_name}': {value!r}")


class RecordLoadError(RelGraphException):
    """Raised when a record source cannot be read or lacks required columns."""
    def __init__(self, source: str, message: str = None):
        self.source = source
        super().__init__(message or f"Failed to load relation records from '{source}'")


@dataclass(frozen=True)
class InvalidFilterReference:
    """A focus id that does not reference a node of the graph.

    Reported alongside the (empty) filter result, never raised.
    """
    parameter: str
    node_id: str

    def __str__(self) -> str:
        return f"Filter parameter '{self.parameter}' references unknown node '{self.node_id}'"
