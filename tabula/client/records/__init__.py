"""Materialized records."""

from .materializer import materialize, materialize_many
from .record import (
    METADATA_KEY,
    Record,
    RecordHandle,
    is_identifiable,
    to_wire,
    transform_object_links,
)

__all__ = [
    "METADATA_KEY",
    "Record",
    "RecordHandle",
    "is_identifiable",
    "materialize",
    "materialize_many",
    "to_wire",
    "transform_object_links",
]
