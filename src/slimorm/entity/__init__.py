"""
Entity

Base class for persisted records and the metadata describing which of their
fields are stored and under what column names.
"""

from slimorm.entity.base import Entity, entity_name, resolve_entity_type
from slimorm.entity.mapping import ColumnBinding, EntityMapping, column, mapping_for

__all__ = [
    "ColumnBinding",
    "Entity",
    "EntityMapping",
    "column",
    "entity_name",
    "mapping_for",
    "resolve_entity_type",
]
