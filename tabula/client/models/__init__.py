"""Pydantic v2 models for schema definitions and response metadata.

All models are immutable (frozen=True) so they can be shared between
pages, cache entries and records.
"""

from .metadata import PageInfo, RecordMetadata, RecordsMetadata
from .schema import Column, LinkTarget, Schema, Table

__all__ = [
    "Column",
    "LinkTarget",
    "PageInfo",
    "RecordMetadata",
    "RecordsMetadata",
    "Schema",
    "Table",
]
