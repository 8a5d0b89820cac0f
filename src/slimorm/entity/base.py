import importlib
import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from slimorm.errors import ConfigurationError, UnknownTypeError

if TYPE_CHECKING:
    from slimorm.repository.manager import RepositoryManager

_entity_types: dict[str, type["Entity"]] = {}


def entity_name(entity_type: type) -> str:
    """Fully-qualified name of an entity type, e.g. ``app.models.User``."""
    return f"{entity_type.__module__}.{entity_type.__qualname__}"


def resolve_entity_type(name: str) -> type["Entity"]:
    """
    Resolve a fully-qualified entity type name to its class.

    Classes register themselves when they are defined; if the name is not
    registered yet its module is imported and the lookup retried.

    Raises:
        UnknownTypeError: if the name does not resolve to an Entity subclass
    """
    entity_type = _entity_types.get(name)
    if entity_type is not None:
        return entity_type

    module_name = name.rpartition(".")[0]
    if module_name:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            raise UnknownTypeError(f"Cannot import entity type: {name!r}") from exc

    entity_type = _entity_types.get(name)
    if entity_type is None:
        raise UnknownTypeError(f"Unknown entity type: {name!r}")
    return entity_type


@dataclass
class Entity:
    """
    Base class for persisted records.

    Subclasses are dataclasses. ``id`` is the primary key and stays None
    until the entity has been stored; the rest of the columns are the
    fields declared with ``column()``.

    An entity only keeps a weak reference to its repository manager, which
    it uses to find its own repository in save() and remove().
    """

    id: int | None = None
    _repository_manager: Optional[weakref.ReferenceType] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        _entity_types[entity_name(cls)] = cls

    def get_id(self) -> int | None:
        return self.id

    def set_id(self, id: int) -> None:
        self.id = id

    def set_repository_manager(self, manager: "RepositoryManager") -> "Entity":
        self._repository_manager = weakref.ref(manager)
        return self

    def get_repository_manager(self) -> "RepositoryManager":
        """
        Get the manager this entity was registered with.

        Raises:
            ConfigurationError: if the entity was never registered or the
                manager no longer exists
        """
        manager = self._repository_manager() if self._repository_manager else None
        if manager is None:
            raise ConfigurationError(
                f"{type(self).__qualname__} is not attached to a repository manager"
            )
        return manager

    def save(self) -> bool:
        """Insert or update this entity through its repository."""
        return self._repository().upsert(self)

    def remove(self) -> bool:
        """Delete this entity through its repository."""
        return self._repository().delete(self)

    def _repository(self):
        return self.get_repository_manager().get_repository(entity_name(type(self)))
