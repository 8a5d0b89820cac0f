"""Exceptions raised by slimorm."""


class OrmError(Exception):
    """Base exception for slimorm errors"""


class NotFoundError(OrmError, LookupError):
    """Raised when a lookup or search yields no rows"""


class UnknownTypeError(OrmError):
    """Raised when a type name does not resolve to an entity class"""


class UnknownRepositoryError(OrmError, LookupError):
    """Raised when no repository is registered for an entity type"""


class ConfigurationError(OrmError):
    """Raised when a table or column name cannot be derived"""


class QueryError(OrmError, ValueError):
    """Raised when query input is invalid"""


class UnknownColumnError(QueryError):
    """Raised when a filter or sort key is not a known column"""
