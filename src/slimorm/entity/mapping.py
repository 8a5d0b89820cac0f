"""
Persistence metadata for entity types.

A persisted member is a dataclass field declared with ``column()``. The
first time an entity type is used its fields are scanned once and turned into
an ``EntityMapping``: an ordered, immutable list of column bindings that the
hydrator and the repositories work from. Fields declared without
``column()`` never reach the database.
"""

import dataclasses
from dataclasses import MISSING, dataclass
from typing import Any, Callable

from slimorm.errors import ConfigurationError

COLUMN_METADATA_KEY = "slimorm.column"
PRIMARY_KEY = "id"


@dataclass(frozen=True)
class ColumnInfo:
    """Options attached to a persisted field through its metadata."""

    name: str | None = None
    setter: str | None = None


@dataclass(frozen=True)
class ColumnBinding:
    """Binds an entity attribute to a table column."""

    attribute: str
    column: str
    setter: str | None = None


@dataclass(frozen=True)
class EntityMapping:
    entity_type: type
    bindings: tuple[ColumnBinding, ...]

    @property
    def columns(self) -> list[str]:
        """Persisted column names in declaration order."""
        return [binding.column for binding in self.bindings]


def column(
    default: Any = MISSING,
    *,
    default_factory: Callable[[], Any] | Any = MISSING,
    name: str | None = None,
    setter: str | None = None,
) -> Any:
    """
    Declare a persisted dataclass field.

    Args:
        default: Value of the field on a freshly built entity. Defaults to
            None when neither ``default`` nor ``default_factory`` is given,
            so entities can always be built without arguments.
        default_factory: Zero-argument callable producing the default.
        name: Column name, when it differs from the attribute name.
        setter: Name of an entity method to call with the row value during
            hydration instead of assigning the attribute directly.

    Usage:
        @dataclass
        class User(Entity):
            name: str = column(default="")
            email: str = column(default="", name="email_address")
    """
    if default is MISSING and default_factory is MISSING:
        default = None
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={COLUMN_METADATA_KEY: ColumnInfo(name=name, setter=setter)},
    )


_mappings: dict[type, EntityMapping] = {}


def mapping_for(entity_type: type) -> EntityMapping:
    """
    Get the persistence mapping of an entity type, building it on first use.

    Raises:
        ConfigurationError: if the type is not a dataclass, a column name is
            used twice or collides with the primary key, or a declared
            setter does not exist.
    """
    mapping = _mappings.get(entity_type)
    if mapping is None:
        mapping = _build_mapping(entity_type)
        _mappings[entity_type] = mapping
    return mapping


def _build_mapping(entity_type: type) -> EntityMapping:
    if not dataclasses.is_dataclass(entity_type):
        raise ConfigurationError(
            f"{entity_type.__qualname__} must be a dataclass to be persisted"
        )

    bindings = []
    seen = set()
    for f in dataclasses.fields(entity_type):
        info = f.metadata.get(COLUMN_METADATA_KEY)
        if info is None:
            continue

        column_name = info.name or f.name
        if column_name == PRIMARY_KEY:
            raise ConfigurationError(
                f"{entity_type.__qualname__}.{f.name}: '{PRIMARY_KEY}' is reserved for the primary key"
            )
        if column_name in seen:
            raise ConfigurationError(
                f"{entity_type.__qualname__}: column '{column_name}' is mapped twice"
            )
        if info.setter is not None and not callable(getattr(entity_type, info.setter, None)):
            raise ConfigurationError(
                f"{entity_type.__qualname__}.{f.name}: setter '{info.setter}' is not a method"
            )

        seen.add(column_name)
        bindings.append(ColumnBinding(attribute=f.name, column=column_name, setter=info.setter))

    return EntityMapping(entity_type=entity_type, bindings=tuple(bindings))
