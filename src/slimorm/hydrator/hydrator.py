from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from slimorm.entity import Entity, mapping_for, resolve_entity_type
from slimorm.logger import get_logger

if TYPE_CHECKING:
    from slimorm.repository.manager import RepositoryManager

logger = get_logger(__name__)


class Hydrator:
    """
    Converts between entities and rows.

    The hydrator is used in two directions:
    - build an entity from a database row (read paths)
    - extract the persisted fields of an entity into a column -> value dict
      (write paths)

    Only fields declared with ``column()`` take part in either direction.
    The primary key is handled separately by hydrate_id().
    """

    def __init__(self, manager: "RepositoryManager"):
        self.manager = manager

    def hydrate(self, entity_type_name: str, row: Mapping[str, Any]) -> Entity:
        """
        Build an entity of the named type from a row.

        Columns of the row that are not mapped to a persisted field are
        ignored; mapped columns missing from the row leave the field at its
        default. The new entity is registered with the repository manager.

        Args:
            entity_type_name: Fully-qualified entity type name
            row: Column name -> value

        Raises:
            UnknownTypeError: if the type name does not resolve
        """
        entity_type = resolve_entity_type(entity_type_name)
        entity = entity_type()

        for binding in mapping_for(entity_type).bindings:
            if binding.column not in row:
                continue
            value = row[binding.column]
            if binding.setter is not None:
                getattr(entity, binding.setter)(value)
            else:
                setattr(entity, binding.attribute, value)

        self.manager.register(entity)
        logger.debug("Hydrated %s from columns %s", entity_type.__qualname__, list(row))
        return entity

    def hydrate_id(self, entity: Entity, id: int) -> None:
        """Set the primary key of an already built entity."""
        entity.set_id(id)

    def extract(self, entity: Entity) -> dict[str, Any]:
        """Get the persisted columns of an entity, in declaration order."""
        return {
            binding.column: getattr(entity, binding.attribute)
            for binding in mapping_for(type(entity)).bindings
        }
