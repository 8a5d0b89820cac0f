from slimorm.entity import Entity, column, entity_name
from slimorm.errors import (
    ConfigurationError,
    NotFoundError,
    OrmError,
    QueryError,
    UnknownColumnError,
    UnknownRepositoryError,
    UnknownTypeError,
)
from slimorm.hydrator import Hydrator
from slimorm.repository import AbstractRepository, RepositoryManager

__all__ = [
    "AbstractRepository",
    "ConfigurationError",
    "Entity",
    "Hydrator",
    "NotFoundError",
    "OrmError",
    "QueryError",
    "RepositoryManager",
    "UnknownColumnError",
    "UnknownRepositoryError",
    "UnknownTypeError",
    "column",
    "entity_name",
]
